"""Patient intake form model and its PDF rendering."""

from __future__ import annotations

import datetime as dt
import re
from enum import Enum
from io import BytesIO
from typing import Optional

from pydantic import BaseModel, Field
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from ..exceptions import ValidationError


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    NOT_SPECIFIED = "not-specified"


class ReportType(str, Enum):
    BLOOD_TEST = "blood_test"
    IMAGING = "imaging"
    PRESCRIPTION = "prescription"
    DISCHARGE_SUMMARY = "discharge_summary"
    REFERRAL_NOTE = "referral_note"
    OTHER = "other"


class PatientIntakeForm(BaseModel):
    """Structured patient intake, rendered client-side into a PDF before upload."""

    # Patient information
    full_name: str = ""
    date_of_birth: Optional[dt.date] = None
    gender: Gender = Gender.NOT_SPECIFIED
    contact_number: str = ""
    email: str = ""
    address: str = ""

    # Medical information
    patient_id: str = ""
    primary_diagnosis: str = ""
    current_medications: str = ""
    allergies: str = ""
    past_medical_history: str = ""
    visit_date: dt.date = Field(default_factory=dt.date.today)

    # Test / report details
    report_type: ReportType = ReportType.PRESCRIPTION
    description: str = ""
    doctor_name: str = ""

    additional_comments: str = ""
    consent: bool = False

    def validate_for_submission(self) -> None:
        """Raise ValidationError with the first problem a user must fix."""
        if not self.full_name.strip():
            raise ValidationError("Full Name is required")
        if not self.description.strip():
            raise ValidationError("Description/Notes is required")
        if not self.consent:
            raise ValidationError("You must consent to upload the document")

    def age(self, today: dt.date | None = None) -> int | None:
        if self.date_of_birth is None:
            return None
        today = today or dt.date.today()
        dob = self.date_of_birth
        years = today.year - dob.year
        if (today.month, today.day) < (dob.month, dob.day):
            years -= 1
        return years


def intake_filename(form: PatientIntakeForm, timestamp_ms: int) -> str:
    slug = re.sub(r"\s+", "_", form.full_name.strip()).lower()
    return f"medical_document_{slug}_{timestamp_ms}.pdf"


# Section bar colours (RGB 0-255) and title colour
_INDIGO = ((79, 70, 229), (255, 255, 255))
_GREEN = ((34, 197, 94), (255, 255, 255))
_PURPLE = ((168, 85, 247), (255, 255, 255))
_AMBER = ((234, 179, 8), (0, 0, 0))
_RED = (239, 68, 68)


def _rgb(c: canvas.Canvas, rgb: tuple[int, int, int], *, fill: bool) -> None:
    r, g, b = (v / 255 for v in rgb)
    if fill:
        c.setFillColorRGB(r, g, b)
    else:
        c.setStrokeColorRGB(r, g, b)


class _IntakeLayout:
    """Top-down cursor over a reportlab canvas with automatic page breaks."""

    margin = 15 * mm
    line_height = 6 * mm
    body_font = ("Helvetica", 10)

    def __init__(self, c: canvas.Canvas):
        self.c = c
        self.width, self.height = A4
        self.text_width = self.width - 2 * self.margin
        self.y = self.height - self.margin

    def _ensure(self, needed: float) -> None:
        if self.y - needed < self.margin + 10 * mm:
            self.c.showPage()
            self.y = self.height - self.margin

    def title(self, text: str) -> None:
        self.c.setFont("Helvetica-Bold", 20)
        self.c.drawCentredString(self.width / 2, self.y, text)
        self.y -= 15 * mm

    def section(self, text: str, colours: tuple[tuple[int, int, int], tuple[int, int, int]]) -> None:
        self._ensure(30 * mm)
        bg, fg = colours
        _rgb(self.c, bg, fill=True)
        self.c.rect(self.margin, self.y - 2 * mm, self.text_width, 8 * mm, stroke=0, fill=1)
        _rgb(self.c, fg, fill=True)
        self.c.setFont("Helvetica-Bold", 12)
        self.c.drawString(self.margin + 5 * mm, self.y, text)
        self.c.setFillColorRGB(0, 0, 0)
        self.y -= 12 * mm

    def lines(self, items: list[str]) -> None:
        font, size = self.body_font
        self.c.setFont(font, size)
        for item in items:
            for line in simpleSplit(item, font, size, self.text_width - 10 * mm) or [""]:
                self._ensure(self.line_height)
                self.c.setFont(font, size)
                self.c.drawString(self.margin + 5 * mm, self.y, line)
                self.y -= self.line_height

    def banner(self, text: str, rgb: tuple[int, int, int]) -> None:
        self._ensure(12 * mm)
        self.y -= 2 * mm
        _rgb(self.c, rgb, fill=True)
        self.c.rect(self.margin, self.y - 2 * mm, self.text_width, 8 * mm, stroke=0, fill=1)
        self.c.setFillColorRGB(1, 1, 1)
        self.c.setFont("Helvetica-Bold", 10)
        line = simpleSplit(text, "Helvetica-Bold", 10, self.text_width - 10 * mm)[0]
        self.c.drawString(self.margin + 5 * mm, self.y, line)
        self.c.setFillColorRGB(0, 0, 0)
        self.y -= 10 * mm

    def gap(self) -> None:
        self.y -= 3 * mm

    def footer(self, text: str) -> None:
        self.c.setFont("Helvetica-Oblique", 8)
        self.c.setFillColorRGB(150 / 255, 150 / 255, 150 / 255)
        self.c.drawCentredString(self.width / 2, 10 * mm, text)
        self.c.setFillColorRGB(0, 0, 0)


def _or_dash(value: object) -> str:
    if value is None:
        return "-"
    text = value.value if isinstance(value, Enum) else str(value)
    return text if text.strip() else "-"


def render_intake_pdf(form: PatientIntakeForm, generated_at: dt.datetime | None = None) -> bytes:
    """Render the intake form as a single PDF document and return its bytes."""
    generated_at = generated_at or dt.datetime.now()
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.setTitle(f"Medical document - {form.full_name}")
    c.setAuthor(form.doctor_name or "Medical Document Portal")

    page = _IntakeLayout(c)
    page.title("MEDICAL DOCUMENT")

    age = form.age(generated_at.date())
    page.section("1. PATIENT INFORMATION", _INDIGO)
    page.lines([
        f"Full Name: {_or_dash(form.full_name)}",
        f"Date of Birth: {_or_dash(form.date_of_birth)}",
        f"Age: {age if age is not None else '-'} years",
        f"Gender: {_or_dash(form.gender)}",
        f"Patient ID: {_or_dash(form.patient_id)}",
        f"Contact: {_or_dash(form.contact_number)}",
        f"Email: {_or_dash(form.email)}",
        f"Address: {_or_dash(form.address)}",
    ])
    page.gap()

    page.section("2. MEDICAL INFORMATION", _GREEN)
    page.lines([
        f"Diagnosis: {_or_dash(form.primary_diagnosis)}",
        f"Visit Date: {_or_dash(form.visit_date)}",
        f"Medications: {_or_dash(form.current_medications)}",
    ])
    if form.allergies.strip():
        page.banner(f"ALLERGIES: {form.allergies}", _RED)
    if form.past_medical_history.strip():
        page.lines([f"Past History: {form.past_medical_history}"])
    page.gap()

    page.section("3. TEST/REPORT DETAILS", _PURPLE)
    page.lines([
        f"Report Type: {_or_dash(form.report_type)}",
        f"Doctor Name: {_or_dash(form.doctor_name)}",
        f"Description: {_or_dash(form.description)}",
    ])
    page.gap()

    if form.additional_comments.strip():
        page.section("4. ADDITIONAL INFORMATION", _AMBER)
        page.lines(form.additional_comments.splitlines())

    page.footer(f"Generated on {generated_at:%Y-%m-%d %H:%M:%S}")
    c.showPage()
    c.save()
    return buf.getvalue()
