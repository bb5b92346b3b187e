"""Render an invoice view-model into a printable HTML document."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from jinja2 import Environment, StrictUndefined, TemplateError, select_autoescape

from ...config import settings
from ...errors import RenderError, ValidationError
from ...schemas.invoices import InvoiceView

logger = logging.getLogger(__name__)

PAGE_FORMATS = {"A4", "A5", "LETTER", "LEGAL"}


def normalize_page_format(page_format: str | None) -> str | None:
    """Uppercase a caller-supplied page format, rejecting sizes the template cannot lay out."""

    if page_format is None or not page_format.strip():
        return None
    fmt = page_format.strip().upper()
    if fmt not in PAGE_FORMATS:
        allowed = ", ".join(sorted(PAGE_FORMATS))
        raise ValidationError(f"Unsupported page format '{page_format}'. Expected one of: {allowed}")
    return fmt


@dataclass(frozen=True, slots=True)
class PageMargins:
    """CSS lengths for each page edge."""

    top: str = settings.invoice_margin
    right: str = settings.invoice_margin
    bottom: str = settings.invoice_margin
    left: str = settings.invoice_margin


INVOICE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <title>Factura {{ view.company.name }} - {{ view.customer.name }}</title>
  <style>
    @page { size: {{ page_format }}; margin: {{ margins.top }} {{ margins.right }} {{ margins.bottom }} {{ margins.left }}; }
    * { margin: 0; padding: 0; box-sizing: border-box; }
    body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }
    .header { background: #1e3c72; color: white; padding: 30px; text-align: center; }
    .logo { font-size: 48px; font-weight: bold; margin-bottom: 10px; }
    .tagline { font-size: 16px; opacity: 0.9; }
    .invoice-info { display: flex; justify-content: space-between; padding: 20px; }
    .client-info { background: #f8f9fa; padding: 20px; margin: 20px 0; border-radius: 8px; }
    .service-details { margin: 20px 0; }
    .billing-table { width: 100%; border-collapse: collapse; margin: 20px 0; }
    .billing-table th { background: #1e3c72; color: white; padding: 15px; }
    .billing-table td { padding: 15px; border-bottom: 1px solid #ddd; }
    .total-row { background: #f8f9fa; font-weight: bold; font-size: 18px; }
    .footer { background: #f8f9fa; padding: 20px; text-align: center; margin-top: 30px; }
    .tracking-item { background: #f0f4f8; padding: 8px; margin: 5px; border-radius: 4px; display: inline-block; }
  </style>
</head>
<body>
  <div class="header">
    <div class="logo">{{ view.company.name }}</div>
    <div class="tagline">{{ view.company.tagline }}</div>
    <div>{{ view.company.location }}</div>
  </div>

  <div class="invoice-info">
    <div>
      <h2>FACTURA DE SERVICIO</h2>
      <p>Comprobante de cobro</p>
    </div>
    <div>
      <h2>Nº {{ view.invoice_number }}</h2>
      <p>Fecha: {{ view.issued_on }}</p>
      <p>Estado: {{ view.status_label }}</p>
    </div>
  </div>

  <div class="client-info">
    <h3>INFORMACIÓN DEL CLIENTE</h3>
    <p><strong>Nombre:</strong> {{ view.customer.name }}</p>
    <p><strong>Casillero:</strong> {{ view.customer.locker_code }}</p>
    <p><strong>Identidad:</strong> {{ view.customer.identity }}</p>
    <p><strong>Teléfono:</strong> {{ view.customer.phone }}</p>
    <p><strong>Email:</strong> {{ view.customer.email }}</p>
    <p><strong>Dirección:</strong> {{ view.customer.address }}</p>
  </div>

  <div class="service-details">
    <h3>DETALLES DEL SERVICIO</h3>
    <p><strong>Tipo:</strong> {{ view.service_label }}</p>
    <p><strong>Peso a cobrar:</strong> {{ view.billable_weight }}</p>
    <p><strong>Descripción:</strong> {{ view.description }}</p>
    <p><strong>Tasa del dólar:</strong> {{ view.exchange_rate }}</p>
    {% if view.notes %}<p><strong>Observaciones:</strong> {{ view.notes }}</p>{% endif %}
    <h4>Trackings:</h4>
    {% for tracking in view.trackings %}<span class="tracking-item">{{ tracking }}</span>{% endfor %}
  </div>

  <table class="billing-table">
    <thead>
      <tr><th>Concepto</th><th>Detalles</th><th>Peso</th><th>Monto</th></tr>
    </thead>
    <tbody>
      {% for line in view.lines %}
      {% if line.kind == "total" %}
      <tr class="total-row">
        <td colspan="3"><strong>{{ line.concept }}</strong></td>
        <td><strong>{{ line.amount_display }}</strong></td>
      </tr>
      {% else %}
      <tr>
        <td>{{ line.concept }}</td>
        <td>{{ line.details }}</td>
        <td>{{ line.weight }}</td>
        <td>{{ line.amount_display }}</td>
      </tr>
      {% endif %}
      {% endfor %}
    </tbody>
  </table>

  <div class="footer">
    <h4>{{ view.company.footer }}</h4>
    <p>Gracias por confiar en nuestros servicios</p>
    <p>Generado: {{ view.generated_at }}</p>
  </div>
</body>
</html>
"""

_environment = Environment(autoescape=select_autoescape(default=True), undefined=StrictUndefined)


def render_invoice(
    view: InvoiceView,
    page_format: str | None = None,
    margins: PageMargins | None = None,
    template: str = INVOICE_TEMPLATE,
) -> bytes:
    """Render ``view`` to UTF-8 HTML with print page size and margins applied."""

    fmt = (page_format or settings.invoice_page_format).strip().upper()
    if fmt not in PAGE_FORMATS:
        raise RenderError(f"Unsupported page format '{page_format}'")
    try:
        compiled = _environment.from_string(template)
        document = compiled.render(view=view, page_format=fmt, margins=margins or PageMargins())
    except TemplateError as exc:
        logger.error(f"Failed to render invoice {view.invoice_number}: {exc}")
        raise RenderError(f"Could not render invoice {view.invoice_number}") from exc
    return document.encode("utf-8")
