# services/document_renderer.py
"""
Document Renderer - lays a lease snapshot out as a PDF.

Rendering is deterministic: the canvas runs in reportlab's invariant mode
(no creation timestamp, fixed document id) and the snapshot carries every
value that is printed, so identical snapshots give identical bytes.
"""
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from io import BytesIO
from typing import Any, Optional

from reportlab.lib.pagesizes import LETTER
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

PDF_CONTENT_TYPE = "application/pdf"

MARGIN = 50
LINE_HEIGHT = 14
SECTION_SPACING = 20
FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"


@dataclass(frozen=True)
class SignatureSnapshot:
     role: str
     signer_name: Optional[str]
     signer_email: str
     initials: Optional[str]
     consent_given: bool
     signed_at: datetime
     document_version: int


@dataclass(frozen=True)
class LeaseSnapshot:
     lease_id: int
     document_id: str
     document_version: int
     tenant_name: Optional[str]
     tenant_email: str
     start_date: date
     end_date: date
     monthly_rent: Decimal
     deposit: Decimal
     terms: Optional[str]
     landlord_info: dict = field(default_factory=dict)
     property_info: dict = field(default_factory=dict)
     lease_terms: dict = field(default_factory=dict)
     additional_conditions: Any = None
     tenant_signature: Optional[SignatureSnapshot] = None
     owner_signature: Optional[SignatureSnapshot] = None


def _label(key: str) -> str:
     """postalCode -> Postal code"""
     words = re.sub(r"(?<!^)(?=[A-Z])", " ", key).replace("_", " ").lower()
     return words[:1].upper() + words[1:]


def _value(value: Any) -> str:
     if isinstance(value, bool):
          return "Yes" if value else "No"
     if value is None or value == "":
          return "N/A"
     if isinstance(value, Decimal):
          return f"{value:,.2f} $"
     return str(value)


class _Writer:
     """Top-to-bottom text cursor over a reportlab canvas with page breaks."""

     def __init__(self, pdf: canvas.Canvas):
          self.pdf = pdf
          self.width, self.height = LETTER
          self.y = self.height - MARGIN

     def _ensure_room(self, lines: int = 1) -> None:
          if self.y - lines * LINE_HEIGHT < MARGIN + 40:
               self.pdf.showPage()
               self.y = self.height - MARGIN

     def text(self, text: str, size: int = 10, bold: bool = False) -> None:
          font = BOLD_FONT if bold else FONT
          lines = simpleSplit(text, font, size, self.width - 2 * MARGIN) or [""]
          for line in lines:
               self._ensure_room()
               self.pdf.setFont(font, size)
               self.pdf.drawString(MARGIN, self.y, line)
               self.y -= LINE_HEIGHT

     def heading(self, text: str) -> None:
          self._ensure_room(3)
          self.text(text, size=12, bold=True)

     def pairs(self, values: Optional[dict]) -> None:
          for key, value in (values or {}).items():
               self.text(f"{_label(key)}: {_value(value)}")

     def gap(self) -> None:
          self.y -= SECTION_SPACING


def _signature_block(writer: _Writer, title: str, signature: Optional[SignatureSnapshot]) -> None:
     writer.text(title, bold=True)
     if signature is None:
          writer.text("Not signed")
          writer.gap()
          return
     writer.text(f"Name: {_value(signature.signer_name)}")
     writer.text(f"Email: {signature.signer_email}")
     if signature.initials:
          writer.text(f"Initials: {signature.initials}")
     writer.text(f"Signed at: {signature.signed_at.strftime('%Y-%m-%d %H:%M')} UTC")
     writer.text(f"Consent given: {_value(signature.consent_given)}")
     writer.text(f"Document version: {signature.document_version}")
     writer.gap()


def render_lease_document(snapshot: LeaseSnapshot) -> bytes:
     """Render the lease contract for `snapshot` and return the PDF bytes."""
     buffer = BytesIO()
     pdf = canvas.Canvas(buffer, pagesize=LETTER, invariant=1, pageCompression=0)
     pdf.setTitle(f"Lease {snapshot.document_id}")
     pdf.setAuthor("Lease engine")
     writer = _Writer(pdf)

     writer.text("RESIDENTIAL LEASE", size=16, bold=True)
     writer.text(f"Document ID: {snapshot.document_id}   Version: {snapshot.document_version}", size=8)
     writer.gap()

     writer.heading("SECTION 1 - LANDLORD")
     writer.pairs(snapshot.landlord_info)
     writer.gap()

     writer.heading("SECTION 2 - TENANT")
     writer.text(f"Name: {_value(snapshot.tenant_name)}")
     writer.text(f"Email: {snapshot.tenant_email}")
     writer.gap()

     writer.heading("SECTION 3 - PROPERTY")
     writer.pairs(snapshot.property_info)
     writer.gap()

     writer.heading("SECTION 4 - TERM AND RENT")
     writer.text(f"Start date: {snapshot.start_date.isoformat()}")
     writer.text(f"End date: {snapshot.end_date.isoformat()}")
     writer.text(f"Monthly rent: {_value(snapshot.monthly_rent)}")
     writer.text(f"Deposit: {_value(snapshot.deposit)}")
     writer.pairs(snapshot.lease_terms)
     writer.gap()

     if snapshot.terms or snapshot.additional_conditions:
          writer.heading("SECTION 5 - ADDITIONAL CONDITIONS")
          if snapshot.terms:
               writer.text(snapshot.terms)
          if isinstance(snapshot.additional_conditions, dict):
               writer.pairs(snapshot.additional_conditions)
          elif snapshot.additional_conditions:
               writer.text(str(snapshot.additional_conditions))
          writer.gap()

     writer.heading("SECTION 6 - SIGNATURES")
     _signature_block(writer, "Tenant signature", snapshot.tenant_signature)
     _signature_block(writer, "Owner signature", snapshot.owner_signature)

     pdf.setFont(FONT, 8)
     pdf.drawString(MARGIN, 35, f"Electronically signed - {snapshot.document_id}")
     pdf.showPage()
     pdf.save()
     return buffer.getvalue()
