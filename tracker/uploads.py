import logging
import time
from pathlib import Path

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from .errors import ValidationError

logger = logging.getLogger(__name__)


def upload_dir() -> Path:
    path = Path(current_app.config["UPLOAD_DIR"])
    path.mkdir(parents=True, exist_ok=True)
    return path.resolve()


def stored_name(original: str) -> str:
    """<epoch millis>_<sanitized base><ext>, e.g. 1700000000000_logo.PNG (extension kept as sent)"""
    filename = secure_filename(original)
    p = Path(filename)
    return f"{int(time.time() * 1000)}_{p.stem}{p.suffix}"


def save_upload(file) -> str:
    """Store an uploaded file and return its public URL path."""
    if not isinstance(file, FileStorage) or not (file.filename or "").strip():
        raise ValidationError("No file")

    name = stored_name(file.filename)
    save_path = upload_dir() / name
    file.save(save_path)

    logger.info(f"Stored upload {name}")
    return f"/uploads/{name}"
