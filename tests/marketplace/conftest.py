import io

import pytest
from PIL import Image
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def marketplace_bed():
    from marketplace.domain import marketplace

    bed = DomainFixture(marketplace)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(marketplace_bed):
    from marketplace.checkout.transition import reset_handoffs

    with marketplace_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()

    reset_handoffs()


def image_bytes(width=640, height=480, color=(30, 120, 200), fmt="JPEG", mode="RGB"):
    """Encode a solid-colour image in memory."""
    image = Image.new(mode, (width, height), color)
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture()
def make_image():
    return image_bytes


@pytest.fixture()
def proof_upload():
    from marketplace.imaging.processor import ImageUpload

    return ImageUpload(
        filename="bukti-transfer.jpg",
        content_type="image/jpeg",
        data=image_bytes(1200, 900),
    )


@pytest.fixture()
def add_catalog_item():
    """Persist a catalog item through the admin command; returns its id."""
    from marketplace.catalog.management import AddCatalogItem
    from protean import current_domain

    def _add(name="Kain Ihram", price=150000, stock=10, category="equipment", description="", status=None):
        command = AddCatalogItem(
            name=name,
            description=description,
            price=price,
            stock=stock,
            category=category,
            status=status,
        )
        return current_domain.process(command, asynchronous=False)

    return _add
