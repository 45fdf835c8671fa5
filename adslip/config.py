import os

def _get_env(key, default=None):
    return os.getenv(key, default)

def _get_list(key, default):
    return tuple(s.strip() for s in _get_env(key, default).split(",") if s.strip())

class Config:
    SECRET_KEY = _get_env("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = _get_env("DATABASE_URL", "sqlite:///adslip.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = _get_env("LOG_LEVEL", "info")

    UPLOAD_FOLDER = _get_env("UPLOAD_FOLDER", "uploads")
    MAX_CONTENT_LENGTH = int(float(_get_env("MAX_UPLOAD_MB", "10")) * 1024 * 1024)

    ALLOWED_EXTENSIONS = set((_get_env("ALLOWED_EXTENSIONS", "jpg,jpeg,png,webp")).split(","))

    DEFAULT_PLATFORM = _get_env("DEFAULT_PLATFORM", "META_ADS")
    DEFAULT_CURRENCY = _get_env("DEFAULT_CURRENCY", "THB")

    # Tesseract
    TESSERACT_CMD = _get_env("TESSERACT_CMD")
    OCR_LANG = _get_env("OCR_LANG", "eng")
    OCR_PSM = int(_get_env("OCR_PSM", "6"))
    OCR_CHAR_WHITELIST = _get_env("OCR_CHAR_WHITELIST", "")
    OCR_TIMEOUT_SECONDS = float(_get_env("OCR_TIMEOUT_SECONDS", "20"))
    OCR_THRESHOLD = int(_get_env("OCR_THRESHOLD", "170"))

    QR_MAX_WIDTH = int(_get_env("QR_MAX_WIDTH", "1200"))

    # Amount scoring keywords, comma separated
    CURRENCY_KEYWORDS = _get_list("CURRENCY_KEYWORDS", "บาท,baht,thb")
    AMOUNT_KEYWORDS = _get_list(
        "AMOUNT_KEYWORDS", "จำนวนเงิน,จำนวน,ยอดเงิน,ยอดชำระ,ยอดโอน,amount,total"
    )
    FEE_KEYWORDS = _get_list("FEE_KEYWORDS", "ค่าธรรมเนียม,fee,charge,surcharge")
