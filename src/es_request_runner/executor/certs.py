"""CA certificate loading for custom TLS trust."""

import re
from pathlib import Path

BEGIN_MARKER = "-----BEGIN CERTIFICATE-----"
END_MARKER = "-----END CERTIFICATE-----"

_BASE64 = re.compile(r"^[A-Za-z0-9+/]+={0,2}$")


class CertificateError(ValueError):
    """Certificate file is unreadable or not valid base64."""


def is_cert_valid(data: str) -> bool:
    """Check that the payload between the PEM markers is base64."""
    payload = data.replace(BEGIN_MARKER, "").replace(END_MARKER, "").strip()
    cleaned = re.sub(r"\s+", "", payload)
    return bool(_BASE64.match(cleaned))


def normalize_cert(data: str) -> str:
    """Return PEM text; raw base64 is wrapped in 64-character lines."""
    if "BEGIN CERTIFICATE" in data:
        return data
    cleaned = re.sub(r"\s+", "", data)
    lines = [cleaned[i:i + 64] for i in range(0, len(cleaned), 64)]
    return "\n".join([BEGIN_MARKER, *lines, END_MARKER])


def load_cert_data(path: str | Path | None) -> str | None:
    """Read and normalize the certificate at ``path``; ``None`` when no path is set."""
    if not path:
        return None

    try:
        data = Path(path).expanduser().read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CertificateError(f'Could not read certificate file at path "{path}"') from e

    if not is_cert_valid(data):
        raise CertificateError(f'Certificate at path "{path}" is not valid')

    return normalize_cert(data)
