import httpx
from loguru import logger

from ec2_macos_watchdog.domain.errors import ConnectivityError
from ec2_macos_watchdog.domain.ports.probe_port import ConnectivityProbePort

IMDS_TOKEN_URL = "http://169.254.169.254/latest/api/token"
IMDS_TOKEN_TTL_HEADER = "X-aws-ec2-metadata-token-ttl-seconds"
IMDS_TOKEN_LIFETIME = "941"  # arbitrary short-lived token lifetime
IMDS_REQUEST_TIMEOUT = 5.0


class ImdsConnectivityProbe(ConnectivityProbePort):
    """Checks IMDS reachability by requesting a session token.

    A single PUT is issued per check. Retrying is left to the caller.
    """

    def __init__(
        self,
        url: str = IMDS_TOKEN_URL,
        timeout_s: float = IMDS_REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.timeout_s = timeout_s
        self._transport = transport

    async def check(self) -> None:
        logger.info("Starting IMDS connectivity check")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s,
                transport=self._transport,
            ) as client:
                # Non-streaming request: the body is read before put() returns
                response = await client.put(
                    self.url,
                    headers={IMDS_TOKEN_TTL_HEADER: IMDS_TOKEN_LIFETIME},
                )
        except httpx.HTTPError as e:
            logger.error("Failed to connect to IMDS: {}", e)
            raise ConnectivityError(f"failed to connect to IMDS: {e}") from e

        if response.status_code != httpx.codes.OK:
            logger.error("IMDS returned non-200 status code: {}", response.status_code)
            raise ConnectivityError(f"IMDS returned non-200 status code: {response.status_code}")

        logger.info("IMDS connectivity check passed")
