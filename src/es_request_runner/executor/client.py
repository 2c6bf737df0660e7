"""Send a scanned region to an Elasticsearch host over HTTP."""

import logging
import os
import tempfile
import time
from pathlib import Path

import requests
from requests.adapters import HTTPAdapter

from es_request_runner.config import Settings
from es_request_runner.executor.certs import CertificateError, load_cert_data
from es_request_runner.executor.result import Err, ExecutionResult, Ok
from es_request_runner.navigation import resolve_file_ref
from es_request_runner.scanner.base import Region
from es_request_runner.scanner.body import is_bulk_path, strip_json_comments

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
NDJSON_CONTENT_TYPE = "application/x-ndjson"


class HostnameMismatchAdapter(HTTPAdapter):
    """HTTPS adapter that verifies the chain but not the certificate hostname."""

    def init_poolmanager(self, *args, **kwargs):
        kwargs["assert_hostname"] = False
        return super().init_poolmanager(*args, **kwargs)


def build_url(host: str, path: str) -> str:
    """Join host and path; hosts without a scheme default to http."""
    host = host.strip()
    if "://" not in host:
        host = "http://" + host
    return host.rstrip("/") + "/" + path.lstrip("/")


def wants_ndjson(region: Region) -> bool:
    """Bulk regions, and file-backed requests to bulk endpoints, send NDJSON."""
    return region.is_bulk or (region.body is None and is_bulk_path(region.path.text))


def prepare_body(region: Region, base_dir: Path | None = None) -> str | None:
    """Request payload: the inline body without comments, else the referenced file.

    Raises OSError or UnicodeDecodeError when the referenced file cannot be read.
    """
    if region.body is not None:
        body = strip_json_comments(region.body.text)
    else:
        file_path = resolve_file_ref(region, base_dir)
        if file_path is None:
            return None
        body = file_path.read_text(encoding="utf-8")

    if not body.strip():
        return None
    if wants_ndjson(region):
        # Bulk endpoints reject a payload without the final newline.
        body = "\n".join(line for line in body.splitlines() if line.strip()) + "\n"
    return body


def _decode(response: requests.Response):
    try:
        return response.json()
    except ValueError:
        return response.text


def _elapsed(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


class RequestExecutor:
    """Executes regions against the configured host and returns tagged results."""

    def __init__(self, settings: Settings, session: requests.Session | None = None):
        self.settings = settings
        self.session = session or requests.Session()
        self.notices: list[str] = []
        if settings.ignore_hostname_mismatch:
            self.session.mount("https://", HostnameMismatchAdapter())

    def _verify(self) -> tuple[bool | str, str | None]:
        """``verify`` argument for requests plus a temp CA file to clean up."""
        if self.settings.skip_ssl_certificate_verification:
            return False, None
        try:
            cert_data = load_cert_data(self.settings.cert_file_path)
        except CertificateError as e:
            logger.warning("%s; using the default trust store", e)
            self.notices.append(str(e))
            return True, None
        if cert_data is None:
            return True, None

        fd, ca_path = tempfile.mkstemp(prefix="es-request-runner-", suffix=".pem")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(cert_data)
        return ca_path, ca_path

    def execute(self, region: Region, base_dir: Path | None = None) -> ExecutionResult:
        """Send ``region``; transport failures come back as ``Err``, never raised."""
        self.notices = []
        started = time.monotonic()

        try:
            body = prepare_body(region, base_dir)
        except (OSError, UnicodeDecodeError) as e:
            logger.error("could not read body file for %s: %s", region.label, e)
            return Err(kind="file", message=f"Could not read body file: {e}")

        url = build_url(self.settings.host, region.path.text)
        headers = {"Content-Type": NDJSON_CONTENT_TYPE if wants_ndjson(region) else JSON_CONTENT_TYPE}
        verify, ca_path = self._verify()

        logger.info("%s %s", region.method.text.upper(), url)
        try:
            response = self.session.request(
                region.method.text.upper(),
                url,
                data=body.encode("utf-8") if body is not None else None,
                headers=headers,
                verify=verify,
                timeout=self.settings.request_timeout,
            )
        except requests.exceptions.SSLError as e:
            return Err(kind="tls", message=str(e), elapsed_ms=_elapsed(started))
        except requests.exceptions.Timeout as e:
            return Err(kind="timeout", message=str(e), elapsed_ms=_elapsed(started))
        except requests.exceptions.ConnectionError as e:
            return Err(kind="connection", message=str(e), elapsed_ms=_elapsed(started))
        except requests.exceptions.RequestException as e:
            return Err(kind="request", message=str(e), elapsed_ms=_elapsed(started))
        finally:
            if ca_path is not None:
                os.unlink(ca_path)

        elapsed = _elapsed(started)
        payload = _decode(response)
        if response.status_code >= 400:
            message = f"Request failed with status code {response.status_code}"
            return Err(kind="http", message=message, status=response.status_code, raw_body=payload, elapsed_ms=elapsed)
        return Ok(status=response.status_code, body=payload, elapsed_ms=elapsed)
