"""Wire form of an order, in the field names the admin review screens read."""


def _iso(value):
    return value.isoformat() if value else None


def to_document(order) -> dict:
    return {
        "id": str(order.id),
        "orderNumber": order.order_number,
        "userId": str(order.owner_id),
        "userEmail": order.owner_email,
        "userName": order.owner_name,
        "phoneNumber": order.phone_number,
        "deliveryAddress": order.delivery_address,
        "items": [
            {
                "itemId": str(line.item_id),
                "itemName": line.item_name,
                "image": line.image,
                "price": line.price,
                "quantity": line.quantity,
                "subtotal": line.subtotal,
            }
            for line in order.items
        ],
        "totalAmount": order.total_amount,
        "paymentProofUrl": order.payment_proof_url,
        "paymentProofFileName": order.payment_proof_file_name,
        "notes": order.notes,
        "status": order.status,
        "reviewedBy": str(order.reviewed_by) if order.reviewed_by else None,
        "reviewedByName": order.reviewed_by_name,
        "reviewedAt": _iso(order.reviewed_at),
        "adminNotes": order.admin_notes,
        "createdAt": _iso(order.created_at),
        "updatedAt": _iso(order.updated_at),
    }
