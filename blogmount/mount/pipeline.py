import logging

from opentelemetry import trace

from blogmount.mount.assembler import ResponseAssembler
from blogmount.mount.classifier import classify
from blogmount.mount.config import MountConfig
from blogmount.mount.errors import UpstreamError
from blogmount.mount.fallback import build_error_response
from blogmount.mount.models import InboundRequest, OutboundResponse
from blogmount.mount.paths import build_upstream_url
from blogmount.mount.rewrite import RewriteEngine
from blogmount.mount.upstream import UpstreamClient, build_upstream_request
from blogmount.utils.exception_logging import log_exception_with_details
from blogmount.utils.traced_requests import traced_request

logger = logging.getLogger("uvicorn.error")
tracer = trace.get_tracer(__name__)


class MountProxy:
    """
    Request translation and response rewriting for one mounted origin.

    Built once at startup; holds only immutable configuration and the compiled
    rewrite rules, so a single instance serves all requests concurrently.
    """

    def __init__(self, config: MountConfig, client: UpstreamClient = None):
        self.config = config
        self.client = client or UpstreamClient(config)
        self.engine = RewriteEngine(config)
        self.assembler = ResponseAssembler(config, self.engine)

    async def handle(self, inbound: InboundRequest) -> OutboundResponse:
        """
        Run the full pipeline. Always returns a response: upstream failures and
        unexpected faults both end in the fallback page.
        """
        method = inbound.method.upper()
        upstream_url = build_upstream_url(
            inbound.mount_relative_path, inbound.query_string, self.config
        )
        with traced_request(
            tracer,
            operation="proxy_request",
            start_message=f"[Proxy] {method} {inbound.mount_relative_path} -> {upstream_url}",
            extra_attrs={"proxy.upstream_url": upstream_url, "proxy.method": method},
        ) as span:
            try:
                upstream_request = build_upstream_request(inbound, self.config)
                upstream = await self.client.fetch(upstream_request)
                span.set_attribute("proxy.status_code", upstream.status_code)

                kind = classify(upstream.content_type, inbound.mount_relative_path)
                span.set_attribute("proxy.content_kind", kind.value)

                outbound = self.assembler.assemble(kind, upstream)
                logger.info(
                    f"[Proxy] {upstream.status_code} {kind.value} {upstream_url}"
                )
                return outbound
            except UpstreamError as e:
                span.set_attribute("proxy.error", e.kind)
                log_exception_with_details(
                    logger, f"[Proxy] Upstream {e.kind} for {upstream_url}:", e
                )
                return self.fallback(inbound, e)
            except Exception as e:
                span.set_attribute("proxy.error", type(e).__name__)
                log_exception_with_details(
                    logger, f"[Proxy] Unexpected failure for {upstream_url}:", e
                )
                return self.fallback(inbound, e)

    def fallback(self, inbound: InboundRequest, error: BaseException) -> OutboundResponse:
        return build_error_response(
            error, inbound.mount_relative_path, self.config, inbound.query_string
        )
