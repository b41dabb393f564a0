import logging
import re

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+")
PHONE_PATTERN = re.compile(r"\+?\d{2,3}[-.\s]?\d{3}[-.\s]?\d{3}[-.\s]?\d{3,4}")
# Vietnamese plates such as 29B1-123.45 or 30A-567.89
PLATE_PATTERN = re.compile(r"\b\d{2}[A-Z]{1,2}\d?-\d{3}\.\d{2}\b")


def mask_pii(text: str) -> str:
    if "@" in text:
        text = EMAIL_PATTERN.sub("[EMAIL]", text)
    if any(c.isdigit() for c in text):
        text = PLATE_PATTERN.sub("[PLATE]", text)
        text = PHONE_PATTERN.sub("[PHONE]", text)
    return text


class PIIFilter(logging.Filter):
    """Masks emails, phone numbers and license plates in messages and string args."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = mask_pii(record.msg)
        if isinstance(record.args, tuple):
            record.args = tuple(mask_pii(arg) if isinstance(arg, str) else arg for arg in record.args)
        return True
