"""Structural metric collection for one parsed document."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from flowlint.core.complexity import calculate_flow_complexity
from flowlint.core.query import attribute
from flowlint.report import (
    ApiEndpoint,
    ExternalService,
    FlowComplexitySample,
    ProjectMetrics,
    Scheduler,
)

if TYPE_CHECKING:
    from pathlib import Path

    from flowlint.core.document import Document, Element

_MULE_NAMESPACE = re.compile(r"^http://www\.mulesoft\.org/schema/mule/(.+)$")
_CORE_NAMESPACES: frozenset[str] = frozenset({"core", "documentation", "ee/core", "doc"})
_APIKIT_FLOW = re.compile(r"^(get|post|put|patch|delete|head|options):\\(.+?)(?::|$)", re.IGNORECASE)
_ENVIRONMENT = re.compile(r"^(dev|local|prod|qa|staging|uat|test|sandbox)", re.IGNORECASE)
_PROPERTY_SUFFIXES: frozenset[str] = frozenset({".yaml", ".yml", ".properties"})


def file_complexity_bucket(total_flows: int) -> str:
    """``simple`` under 5 flows, ``medium`` under 10, else ``complex``."""
    if total_flows >= 10:
        return "complex"
    if total_flows >= 5:
        return "medium"
    return "simple"


def _is_connector_config(node: Element) -> bool:
    name = node.local_name
    return "-config" in name or name == "config" or "-connection" in name


def _is_transform(doc: Document, node: Element) -> bool:
    if node.local_name != "transform":
        return False
    if node.prefix == "ee":
        return True
    return doc.namespaces.get(node.prefix or "", "").endswith("/ee/core")


def _scheduler_flow(doc: Document, trigger: Element) -> str:
    strategy = doc.parent(trigger)
    owner = doc.parent(strategy) if strategy is not None else None
    owner_flow = doc.parent(owner) if owner is not None else None
    for candidate in (owner_flow, owner):
        if candidate is not None and candidate.local_name in ("flow", "sub-flow"):
            return attribute(candidate, "name") or "unknown"
    return "unknown"


def collect_file_metrics(doc: Document, relative_path: str) -> ProjectMetrics:
    """Raw counts for one document, to be merged into the scan accumulator."""
    metrics = ProjectMetrics()

    flows = doc.select_all("//flow")
    sub_flows = doc.select_all("//sub-flow")
    metrics.flow_count = len(flows)
    metrics.sub_flow_count = len(sub_flows)

    for flow in flows:
        result = calculate_flow_complexity(doc, flow)
        metrics.flow_complexity_data.append(
            FlowComplexitySample(
                flow_name=attribute(flow, "name") or "unnamed",
                file=relative_path,
                complexity=result.complexity,
                rating=result.rating,
                breakdown=result.breakdown(),
            )
        )

    all_nodes = list(doc.iter())
    metrics.dw_transform_count = sum(1 for node in all_nodes if _is_transform(doc, node))

    configs = [node for node in all_nodes if _is_connector_config(node)]
    metrics.connector_config_count = len(configs)
    for node in configs:
        if node.prefix and node.prefix not in metrics.connector_types:
            metrics.connector_types.append(node.prefix)

    for prefix_uri in doc.namespaces.values():
        match = _MULE_NAMESPACE.match(prefix_uri)
        if match is None:
            continue
        connector = match.group(1)
        if connector not in _CORE_NAMESPACES and connector not in metrics.connector_types:
            metrics.connector_types.append(connector)

    listeners = doc.select_all("//listener")
    metrics.http_listener_count = len(listeners)
    metrics.error_handler_count = doc.count("//try")
    metrics.choice_router_count = doc.count("//choice")

    for flow in flows:
        match = _APIKIT_FLOW.match(attribute(flow, "name") or "")
        if match:
            path = "/" + match.group(2).replace("\\", "/")
            metrics.add_endpoint(ApiEndpoint(path=path, method=match.group(1).upper()))
    for listener in listeners:
        path = attribute(listener, "path")
        if path and "*" not in path:
            metrics.add_endpoint(ApiEndpoint(path=path, method="ALL"))

    for uri in doc.namespaces.values():
        lowered = uri.lower()
        if "tls" in lowered and "TLS" not in metrics.security_patterns:
            metrics.security_patterns.append("TLS")
        if "oauth" in lowered and "OAuth" not in metrics.security_patterns:
            metrics.security_patterns.append("OAuth")
    if any("secure-properties" in node.local_name for node in all_nodes):
        metrics.security_patterns.append("Secure Properties")
    if any("basic-authentication" in node.local_name for node in all_nodes):
        metrics.security_patterns.append("Basic Auth")

    for config in doc.select_all("//request-config"):
        host = attribute(config, "host") or attribute(config, "basePath") or "external"
        metrics.add_external_service(ExternalService(name=attribute(config, "name") or "unknown", host=host))

    for trigger in doc.select_all("//scheduling-strategy/*"):
        if trigger.local_name == "cron":
            value = attribute(trigger, "expression") or ""
            metrics.schedulers.append(Scheduler(type="cron", value=value, flow=_scheduler_flow(doc, trigger)))
        elif trigger.local_name == "fixed-frequency":
            frequency = attribute(trigger, "frequency") or ""
            unit = attribute(trigger, "timeUnit") or "MILLISECONDS"
            metrics.schedulers.append(
                Scheduler(type="fixed", value=f"{frequency} {unit}", flow=_scheduler_flow(doc, trigger))
            )

    metrics.file_complexity[relative_path] = file_complexity_bucket(len(flows) + len(sub_flows))
    return metrics


def detect_environments(project_root: Path) -> list[str]:
    """Environment names from property files under ``src/main/resources``.

    ``dev.yaml`` -> ``dev``, ``local-secure.yaml`` -> ``local``.
    """
    resources = project_root / "src" / "main" / "resources"
    if not resources.is_dir():
        return []

    found: list[str] = []
    for path in sorted(resources.rglob("*")):
        if not path.is_file() or path.suffix not in _PROPERTY_SUFFIXES:
            continue
        match = _ENVIRONMENT.match(path.stem)
        if match:
            env = match.group(1).lower()
            if env not in found:
                found.append(env)
    return found
