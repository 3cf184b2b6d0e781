"""Dashboard copier — copies a dashboard and its dependency graph.

Runs three phases against a source and a destination endpoint:

1. dashboard: fetch by id (fatal on failure) and write it.
2. visualizations: resolve ids from panelsJSON, batch-fetch, write each.
3. saved searches: resolve ids from the visualizations, batch-fetch,
   optionally rewrite the backing index, write each.

Objects keep their original ids. Nothing is rolled back: a failed write is
reported and the copy moves on, so re-running the copy is the recovery.
"""

from __future__ import annotations

import logging
from typing import Callable

import dependency_resolver
from errors import (
    ConfigError,
    FatalFetchError,
    PartialWriteError,
    RewriteSkipError,
    StoreError,
)
from field_rewriter import rewrite_search_index
from store_client import StoreClient
from store_models import (
    ClusterEndpoint,
    CopyReport,
    JsonObject,
    ObjectReport,
    ObjectType,
    WriteOutcome,
)

log = logging.getLogger(__name__)

ClientFactory = Callable[..., StoreClient]


class DashboardCopier:
    """Copies one dashboard with its visualizations and saved searches."""

    def __init__(
        self,
        source: ClusterEndpoint,
        destination: ClusterEndpoint,
        saved_search_index: str | None = None,
        verbose: bool = False,
        client_factory: ClientFactory = StoreClient,
    ):
        self.source = source
        self.destination = destination
        self.saved_search_index = saved_search_index
        self.verbose = verbose
        self.client_factory = client_factory

    def _connect(self, endpoint: ClusterEndpoint) -> StoreClient:
        return self.client_factory(endpoint, verbose=self.verbose)

    def copy(self, dashboard_id: str) -> CopyReport:
        if self.source == self.destination:
            raise ConfigError("The source and destination clusters are the same.")

        report = CopyReport(dashboard_id=dashboard_id)
        log.info(
            "Copying dashboard %s from %s to %s",
            dashboard_id, self.source.describe(), self.destination.describe(),
        )

        dashboard_body = self._copy_dashboard(dashboard_id, report)
        visualizations = self._copy_visualizations(dashboard_body, report)
        self._copy_saved_searches(visualizations, report)

        log.info("Dashboard %s: %s", dashboard_id, report.summary())
        return report

    # ── Phases ───────────────────────────────────────────────────────

    def _copy_dashboard(self, dashboard_id: str, report: CopyReport) -> JsonObject:
        with self._connect(self.source) as source, self._connect(self.destination) as destination:
            try:
                dashboard = source.fetch_by_id(ObjectType.dashboard.value, dashboard_id)
            except StoreError as e:
                raise FatalFetchError(f"Cannot fetch dashboard {dashboard_id}: {e}") from e
            # Fail on a corrupt root before anything is written.
            dependency_resolver.visualization_ids_of(dashboard.body)
            try:
                self._write(destination, ObjectType.dashboard.value, dashboard_id, dashboard.body, report)
            except PartialWriteError as e:
                log.error("%s", e)
        return dashboard.body

    def _copy_visualizations(
        self,
        dashboard_body: JsonObject,
        report: CopyReport,
    ) -> dict[str, JsonObject]:
        object_type = ObjectType.visualization.value
        with self._connect(self.source) as source, self._connect(self.destination) as destination:
            try:
                ids, visualizations = dependency_resolver.fetch_visualizations(source, dashboard_body)
            except StoreError as e:
                ids = list(dict.fromkeys(dependency_resolver.visualization_ids_of(dashboard_body)))
                self._fetch_failed(object_type, ids, e, report)
                return {}

            for object_id in _write_order(ids, visualizations):
                if object_id not in visualizations:
                    log.error("Missing %s %s at source", object_type, object_id)
                    report.add(ObjectReport(
                        type=object_type, id=object_id, outcome=WriteOutcome.missing,
                        message="not found at source",
                    ))
                    continue
                try:
                    self._write(destination, object_type, object_id, visualizations[object_id], report)
                except PartialWriteError as e:
                    log.error("%s", e)
        return visualizations

    def _copy_saved_searches(
        self,
        visualizations: dict[str, JsonObject],
        report: CopyReport,
    ) -> None:
        object_type = ObjectType.search.value
        with self._connect(self.source) as source, self._connect(self.destination) as destination:
            try:
                ids, searches = dependency_resolver.fetch_saved_searches(source, visualizations.values())
            except StoreError as e:
                ids = sorted(dependency_resolver.saved_search_ids_of(visualizations.values()))
                self._fetch_failed(object_type, ids, e, report)
                return

            for object_id in _write_order(ids, searches):
                if object_id not in searches:
                    log.warning("Saved search %s not found at source, skipping", object_id)
                    report.add(ObjectReport(
                        type=object_type, id=object_id, outcome=WriteOutcome.missing,
                        message="not found at source",
                    ))
                    continue
                try:
                    body = rewrite_search_index(searches[object_id], self.saved_search_index)
                except RewriteSkipError as e:
                    log.error("Cannot rewrite %s %s: %s", object_type, object_id, e)
                    report.add(ObjectReport(
                        type=object_type, id=object_id, outcome=WriteOutcome.skipped,
                        message=str(e),
                    ))
                    continue
                try:
                    self._write(destination, object_type, object_id, body, report)
                except PartialWriteError as e:
                    log.error("%s", e)

    # ── Helpers ──────────────────────────────────────────────────────

    def _write(
        self,
        destination: StoreClient,
        object_type: str,
        object_id: str,
        body: JsonObject,
        report: CopyReport,
    ) -> None:
        result = destination.upsert(object_type, object_id, body)
        report.add(ObjectReport(
            type=object_type,
            id=object_id,
            outcome=result.outcome,
            status_code=result.status_code,
            message=result.message,
        ))
        if not result.ok:
            raise PartialWriteError(object_type, object_id, result.status_code, result.message or "")

    def _fetch_failed(
        self,
        object_type: str,
        ids: list[str],
        error: StoreError,
        report: CopyReport,
    ) -> None:
        log.error("%s", error)
        for object_id in ids:
            report.add(ObjectReport(
                type=object_type,
                id=object_id,
                outcome=WriteOutcome.failed,
                status_code=error.status_code,
                message=str(error),
            ))


def _write_order(resolved_ids: list[str], id_map: dict[str, JsonObject]) -> list[str]:
    """Resolved ids first, then any extra ids the store returned."""
    requested = set(resolved_ids)
    return list(resolved_ids) + [i for i in id_map if i not in requested]
