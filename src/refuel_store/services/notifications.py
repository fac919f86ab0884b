"""Order confirmation email content."""

from dataclasses import dataclass
from html import escape

from refuel_store.domain.checkout import SHIPPING_OPTIONS, OrderSnapshot
from refuel_store.domain.money import format_money


@dataclass(frozen=True)
class EmailContent:
    subject: str
    text: str
    html: str


def render_order_confirmation(
    order_reference: str, snapshot: OrderSnapshot, storefront_url: str
) -> EmailContent:
    """Render the plain-text and HTML confirmation for an order."""
    totals = snapshot.totals
    shipping = snapshot.shipping
    option = SHIPPING_OPTIONS[shipping.shipping_tier]
    shipping_label = (
        "Free" if totals.shipping_cost == 0 else format_money(totals.shipping_cost)
    )
    ship_to = [
        shipping.full_name,
        shipping.address,
        f"{shipping.city}, {shipping.region} {shipping.postal_code}",
    ]
    summary = [
        ("Subtotal", format_money(totals.subtotal)),
        ("Shipping", shipping_label),
        ("Tax", format_money(totals.tax)),
        ("Total", format_money(totals.total)),
    ]

    text_lines = [
        f"Thanks for your order, {shipping.first_name}!",
        f"Order number: {order_reference}",
        "",
    ]
    for item in snapshot.items:
        text_lines.append(
            f"{item.emoji} {item.name} x{item.quantity}  {format_money(item.line_total)}"
        )
        if item.subtitle:
            text_lines.append(f"    {item.subtitle}")
    text_lines.append("")
    text_lines.extend(f"{label}: {value}" for label, value in summary)
    text_lines.extend(["", f"Shipping to ({option.label}, {option.detail}):"])
    text_lines.extend(ship_to)
    text_lines.extend(["", f"Shop again: {storefront_url}"])

    item_rows = "".join(
        "<tr>"
        f"<td>{escape(item.emoji)} {escape(item.name)}"
        + (f"<br><small>{escape(item.subtitle)}</small>" if item.subtitle else "")
        + f"</td><td>x{item.quantity}</td>"
        f"<td align=\"right\">{format_money(item.line_total)}</td>"
        "</tr>"
        for item in snapshot.items
    )
    summary_rows = "".join(
        f"<tr><td colspan=\"2\">{label}</td><td align=\"right\">{value}</td></tr>"
        for label, value in summary
    )
    html = (
        "<html><body style=\"font-family: sans-serif\">"
        f"<h1>Thanks for your order, {escape(shipping.first_name)}!</h1>"
        f"<p>Order number: <strong>{escape(order_reference)}</strong></p>"
        f"<table width=\"100%\">{item_rows}{summary_rows}</table>"
        f"<h3>Shipping to</h3><p>{'<br>'.join(escape(line) for line in ship_to)}</p>"
        f"<p>{escape(option.label)} ({escape(option.detail)})</p>"
        f"<p><a href=\"{escape(storefront_url)}\">Shop again</a></p>"
        "</body></html>"
    )
    return EmailContent(
        subject=f"Your ReFuel order is confirmed — {order_reference} ✅",
        text="\n".join(text_lines),
        html=html,
    )
