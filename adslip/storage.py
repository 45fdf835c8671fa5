import os

from flask import current_app

_MIME_EXT = {"image/png": ".png", "image/webp": ".webp", "image/jpeg": ".jpg"}


def guess_ext(filename, mime):
    ext = os.path.splitext(filename or "")[1].lower()
    if ext:
        return ext
    return _MIME_EXT.get(mime, ".jpg")


def upload_dir():
    updir = current_app.config["UPLOAD_FOLDER"]
    os.makedirs(updir, exist_ok=True)
    return updir


def save_receipt_image(data: bytes, digest: str, filename=None, mime=None) -> str:
    """Write the image under its content hash and return the URL it is served from."""
    name = f"{digest}{guess_ext(filename, mime)}"
    path = os.path.join(upload_dir(), name)
    if not os.path.exists(path):
        with open(path, "wb") as out:
            out.write(data)
    return f"/api/uploads/{name}"


def stored_path(receipt_url: str):
    prefix = "/api/uploads/"
    if not receipt_url or not receipt_url.startswith(prefix):
        return None
    return os.path.join(current_app.config["UPLOAD_FOLDER"], receipt_url[len(prefix):])
