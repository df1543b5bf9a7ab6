"""Credential lifecycle around the aggregator."""

from __future__ import annotations

import logging
import os
import random
from typing import Mapping

from permithub.common.config_loader import ConfigBundle
from permithub.common.constants import CREDENTIAL_ENV_VAR, SIMULATED_RECORD_COUNT, STORE_KEY_CREDENTIAL
from permithub.common.http import HttpClient
from permithub.common.models import QueryParameters, ResultSet
from permithub.harvest.aggregator import CredentialCheck, DataAggregator
from permithub.reference.regions import RegionDirectory
from permithub.storage.local_store import LocalStore


def resolve_credential(store: LocalStore, environ: Mapping[str, str] | None = None) -> str:
    stored = store.get(STORE_KEY_CREDENTIAL)
    if isinstance(stored, str) and stored.strip():
        return stored.strip()
    environ = os.environ if environ is None else environ
    return (environ.get(CREDENTIAL_ENV_VAR) or "").strip()


class SearchSession:
    """Holds the current aggregator and the last query.

    Updating the credential never mutates the live aggregator; a new one is built and the
    previous query, if any, is re-run against it.
    """

    def __init__(
        self,
        bundle: ConfigBundle,
        store: LocalStore,
        *,
        http_client: HttpClient | None = None,
        logger: logging.Logger | None = None,
        rng: random.Random | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.bundle = bundle
        self.store = store
        self.http_client = http_client
        self.logger = logger
        self.rng = rng
        self.environ = environ
        self.regions = RegionDirectory.from_bundle(bundle)
        self.last_query: QueryParameters | None = None
        self.aggregator = self._build_aggregator(resolve_credential(store, self.environ))

    def _build_aggregator(self, credential: str) -> DataAggregator:
        return DataAggregator(
            credential,
            self.bundle.services,
            self.regions,
            base_url=self.bundle.base_url,
            http_client=self.http_client,
            logger=self.logger,
            simulated_count=int(self.bundle.defaults.get("simulated_record_count", SIMULATED_RECORD_COUNT)),
            rng=self.rng,
        )

    @property
    def credential(self) -> str:
        return self.aggregator.credential

    def query_for(self, region_code: str, sub_region_code: str, **options) -> QueryParameters:
        options.setdefault("page_size", int(self.bundle.defaults.get("page_size", 100)))
        options.setdefault("page_index", int(self.bundle.defaults.get("page_index", 1)))
        return QueryParameters(region_code=region_code, sub_region_code=sub_region_code, **options)

    def search(self, region_code: str, sub_region_code: str, *, run_id: str | None = None, **options) -> ResultSet:
        query = self.query_for(region_code, sub_region_code, **options)
        self.last_query = query
        return self.aggregator.search(query, run_id=run_id)

    def check_credential(self, key: str) -> CredentialCheck:
        return self.aggregator.check_credential(key)

    def update_credential(self, key: str) -> ResultSet | None:
        key = (key or "").strip()
        if key:
            self.store.set(STORE_KEY_CREDENTIAL, key)
        else:
            # An empty key clears the stored one; the environment still applies.
            self.store.remove(STORE_KEY_CREDENTIAL)
            key = resolve_credential(self.store, self.environ)
        self.aggregator = self._build_aggregator(key)
        if self.last_query is None:
            return None
        return self.aggregator.search(self.last_query)
