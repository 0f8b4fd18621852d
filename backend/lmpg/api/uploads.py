"""CSV upload handling shared by the onboarding and roster import routes."""

from fastapi import UploadFile

from lmpg.core.errors import ValidationFailedError


def is_csv_upload(upload: UploadFile) -> bool:
    filename = (upload.filename or "").lower()
    return filename.endswith(".csv") or upload.content_type == "text/csv"


async def read_csv_upload(upload: UploadFile | None, max_bytes: int) -> bytes:
    """Validate type and size; return the raw bytes."""
    if upload is None:
        raise ValidationFailedError("CSV file is required", "csvFile")
    if not is_csv_upload(upload):
        raise ValidationFailedError("Only CSV files are allowed", "csvFile")
    content = await upload.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise ValidationFailedError(
            f"CSV file exceeds the {max_bytes // (1024 * 1024)}MB limit", "csvFile",
        )
    return content
