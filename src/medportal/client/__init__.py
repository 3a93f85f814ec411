"""Client side of the portal: HTTP client, intake form rendering, workspace."""

from .http import ClientError, DocumentClient
from .intake import Gender, PatientIntakeForm, ReportType, intake_filename, render_intake_pdf
from .workspace import DocumentWorkspace, WorkspaceMessage, format_file_size

__all__ = [
    "ClientError",
    "DocumentClient",
    "Gender",
    "PatientIntakeForm",
    "ReportType",
    "intake_filename",
    "render_intake_pdf",
    "DocumentWorkspace",
    "WorkspaceMessage",
    "format_file_size",
]
