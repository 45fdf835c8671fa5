"""Tesseract OCR behind a single process-wide handle.

``OcrEngine`` probes the Tesseract binary and its trained-data languages once,
on first use, under a lock. Recognition runs on one worker thread, so calls
from concurrent uploads queue up in arrival order.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import CancelledError, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Optional

import pytesseract
from PIL import Image

from .errors import EngineInitializationFailure

logger = logging.getLogger(__name__)


class OcrEngine:
    def __init__(
        self,
        lang: str = "eng",
        psm: int = 6,
        char_whitelist: str = "",
        timeout: float = 20.0,
        tesseract_cmd: Optional[str] = None,
    ):
        self.lang = lang
        self.psm = psm
        self.char_whitelist = char_whitelist
        self.timeout = timeout
        self.tesseract_cmd = tesseract_cmd
        self._init_lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._failure: Optional[EngineInitializationFailure] = None
        self.version = None

    @classmethod
    def from_config(cls, config) -> "OcrEngine":
        return cls(
            lang=config["OCR_LANG"],
            psm=config["OCR_PSM"],
            char_whitelist=config["OCR_CHAR_WHITELIST"],
            timeout=config["OCR_TIMEOUT_SECONDS"],
            tesseract_cmd=config["TESSERACT_CMD"],
        )

    @property
    def tesseract_config(self) -> str:
        parts = [f"--psm {self.psm}", "-c preserve_interword_spaces=1"]
        if self.char_whitelist:
            parts.append(f"-c tessedit_char_whitelist={self.char_whitelist}")
        return " ".join(parts)

    @property
    def ready(self) -> bool:
        return self._executor is not None

    def _start(self) -> None:
        if self.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.tesseract_cmd
        try:
            self.version = pytesseract.get_tesseract_version()
            installed = set(pytesseract.get_languages(config=""))
        except pytesseract.TesseractNotFoundError as exc:
            raise EngineInitializationFailure("tesseract binary not found") from exc
        except (OSError, pytesseract.TesseractError) as exc:
            raise EngineInitializationFailure(f"tesseract probe failed: {exc}") from exc
        missing = [lang for lang in self.lang.split("+") if lang not in installed]
        if missing:
            raise EngineInitializationFailure(
                f"trained data missing for: {', '.join(missing)}"
            )

    def ensure_ready(self) -> None:
        """Initialize once. A failed start is permanent for this engine."""
        if self._executor is not None:
            return
        with self._init_lock:
            if self._executor is not None:
                return
            if self._failure is not None:
                raise self._failure
            logger.info("OCR engine init", extra={"lang": self.lang})
            try:
                self._start()
            except EngineInitializationFailure as exc:
                logger.error("OCR engine init failed: %s", exc)
                self._failure = exc
                raise
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ocr")
            logger.info("OCR engine ready", extra={"version": str(self.version)})

    def _run(self, image: Image.Image) -> str:
        return pytesseract.image_to_string(
            image, lang=self.lang, config=self.tesseract_config, timeout=self.timeout
        )

    def recognize(self, image: Image.Image) -> str:
        """Return the text found in ``image``; empty text when nothing is legible.

        A call that outlives ``timeout`` is abandoned and reads as empty text.
        """
        self.ensure_ready()
        future = self._executor.submit(self._run, image)
        try:
            # queue wait plus the run itself
            text = future.result(timeout=self.timeout * 2)
        except (FutureTimeout, CancelledError):
            future.cancel()
            logger.warning("OCR abandoned after %ss", self.timeout)
            return ""
        except RuntimeError as exc:
            # pytesseract kills the subprocess and raises on its own timeout
            if "timeout" not in str(exc).lower():
                raise
            logger.warning("OCR timed out: %s", exc)
            return ""
        text = text or ""
        logger.debug("OCR text", extra={"text": text})
        return text

    def shutdown(self) -> None:
        with self._init_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=False, cancel_futures=True)
                self._executor = None
