# -*- coding: utf-8 -*-
"""
Service for managing Prometheus metrics.

Provides a centralized service for creating, registering, and collecting metrics.
Also includes middleware for automatically recording HTTP request metrics.
"""

import time
import uuid
from typing import Optional
from flask import Flask, request, g, current_app, has_app_context
from prometheus_client import CollectorRegistry, Counter, Histogram
from prometheus_client.exposition import generate_latest


def init_metrics(app: Flask, registry: Optional[CollectorRegistry] = None) -> None:
    """Initialize metrics service and endpoints."""
    enabled = str(app.config.get('MYLO_METRICS_ENABLED', 'true')).lower() == 'true'
    service = MetricsService(registry=registry, enabled=enabled)
    app.extensions['metrics'] = service

    if service.enabled:
        @app.before_request
        def before_request():
            g.metrics_start_time = time.time()

        @app.after_request
        def after_request(response):
            started = getattr(g, 'metrics_start_time', None)
            if started is not None:
                service.record_http_request(
                    route=request.path,
                    method=request.method,
                    status_code=response.status_code,
                    duration_seconds=time.time() - started
                )
            return response

        @app.route("/metrics")
        def metrics():
            return generate_latest(service.registry), 200, {
                'Content-Type': 'text/plain; version=0.0.4; charset=utf-8'}


def get_metrics_service() -> Optional['MetricsService']:
    """Get the metrics service instance from the current app context."""
    if has_app_context():
        return current_app.extensions.get('metrics')
    return None


class MetricsService:
    """Service for managing Prometheus metrics."""

    def __init__(self, registry: Optional[CollectorRegistry] = None, enabled: bool = True):
        self.enabled = enabled
        # One registry per app so several apps can live in one process (tests).
        self.registry = registry if registry is not None else CollectorRegistry()

        if self.enabled:
            self.http_requests_total = Counter(
                "mylo_http_requests_total",
                "Total number of HTTP requests.",
                ["route", "method", "status"],
                registry=self.registry
            )
            self.http_request_duration_seconds = Histogram(
                "mylo_http_request_duration_seconds",
                "Duration of HTTP requests in seconds.",
                ["route", "method"],
                registry=self.registry
            )
            self.signin_codes_issued_total = Counter(
                "mylo_signin_codes_issued_total",
                "Total number of sign-in codes stored and emailed.",
                registry=self.registry
            )
            self.signin_verifications_total = Counter(
                "mylo_signin_verifications_total",
                "Sign-in code verifications by outcome.",
                ["outcome"],
                registry=self.registry
            )
            self.auth_denials_total = Counter(
                "mylo_auth_denials_total",
                "Rejected bearer tokens by internal reason.",
                ["reason"],
                registry=self.registry
            )

    def record_http_request(
            self,
            route: str,
            method: str,
            status_code: int,
            duration_seconds: float):
        """Record an HTTP request."""
        if self.enabled:
            normalized_route = self._normalize_route(route)
            self.http_requests_total.labels(
                route=normalized_route,
                method=method,
                status=status_code).inc()
            self.http_request_duration_seconds.labels(
                route=normalized_route, method=method).observe(duration_seconds)

    def record_code_issued(self):
        if self.enabled:
            self.signin_codes_issued_total.inc()

    def record_verification(self, outcome: str):
        if self.enabled:
            self.signin_verifications_total.labels(outcome=outcome).inc()

    def record_auth_denial(self, reason: str):
        if self.enabled:
            self.auth_denials_total.labels(reason=reason).inc()

    def _normalize_route(self, route: str) -> str:
        parts = route.split('/')
        for i, part in enumerate(parts):
            if part.isdigit():
                parts[i] = '{id}'
                continue
            try:
                uuid.UUID(part)
                parts[i] = '{uuid}'
            except (ValueError, AttributeError):
                pass
        return '/'.join(parts)
