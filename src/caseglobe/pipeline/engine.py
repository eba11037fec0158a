"""Case engine: the single object the presentation layer talks to.

The engine owns every piece of derived state (location registry, date
index, aggregation matrices, query engine) together with one playback
controller. Nothing lives in module globals.

Loading runs the full batch in order::

    CSV text -> CaseCsvReader -> LocationRegistry + DateIndex
             -> TemporalAggregator -> QueryEngine

All stages are built into locals first and swapped in together, so a failed
load leaves the previous state untouched and a successful one replaces it
atomically.
"""

import logging
from pathlib import Path
from typing import Callable, Optional

import numpy as np
import pandas as pd
import xarray as xr

from caseglobe.aggregation.aggregator import TemporalAggregator
from caseglobe.core.errors import DataNotLoaded
from caseglobe.geo.registry import Location, LocationRegistry
from caseglobe.ingest.reader import CaseCsvReader, IngestResult
from caseglobe.pipeline.playback import PlaybackController
from caseglobe.query.engine import DisplayMode, QueryEngine, marker_scales
from caseglobe.schemas import InternalConfig
from caseglobe.timeline.date_index import DateIndex

__all__ = ['CaseEngine']

logger = logging.getLogger(__name__)


class _LoadedState:
    """Everything derived from one ingestion pass."""

    def __init__(
        self,
        ingest: IngestResult,
        registry: LocationRegistry,
        date_index: DateIndex,
        matrices: xr.Dataset,
        query: QueryEngine,
    ):
        self.ingest = ingest
        self.registry = registry
        self.date_index = date_index
        self.matrices = matrices
        self.query = query


class CaseEngine:
    """Temporal aggregation engine over a static case report file.

    Presentation API
    ================
    - ``location_count``, ``location_projection(index)``, ``projections()``
    - ``date_count``, ``date_label(index)``
    - ``current_values(date_index, mode)``, ``top_countries(date_index, mode, n)``
    - playback: ``play(period_ms)``, ``stop()``, ``set_period(period_ms)``,
      ``advance()``, ``seek(index)``, ``current_index``

    Every query before ``load()``/``load_text()`` raises DataNotLoaded.

    Parameters
    ----------
    config : InternalConfig
        Fully validated runtime configuration.
    on_tick : callable, optional
        Playback listener, called as ``on_tick(date_index)`` on every tick.

    Examples
    --------
    >>> from caseglobe.schemas import resolve_config, ParamConfig
    >>> engine = CaseEngine(resolve_config(ParamConfig()))
    >>> engine.load("data/CV_LatLon_21Jan_12Mar.csv")
    >>> engine.top_countries(engine.date_count - 1, "cumulative", 5)
    [('China', 80793), ('Italy', 12462), ...]
    """

    def __init__(self, config: InternalConfig, on_tick: Optional[Callable[[int], None]] = None):
        self.config = config
        self.on_tick = on_tick
        self.reader = CaseCsvReader(config)
        self.aggregator = TemporalAggregator()
        self._state: Optional[_LoadedState] = None
        self._playback: Optional[PlaybackController] = None

    @classmethod
    def from_csv(cls, path: Path | str, config: InternalConfig, **kwargs) -> "CaseEngine":
        engine = cls(config, **kwargs)
        engine.load(path)
        return engine

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, path: Path | str) -> None:
        """Load a CSV file. File errors propagate; no partial state is kept."""
        self._install(self._build(self.reader.read(path)))

    def load_text(self, text: str) -> None:
        """Load CSV content already held in memory."""
        self._install(self._build(self.reader.parse(text)))

    def _build(self, ingest: IngestResult) -> _LoadedState:
        samples = ingest.samples.copy()

        registry = LocationRegistry.from_config(self.config)
        samples["location_index"] = np.array(
            [
                registry.register(lat, lon, country)
                for lat, lon, country in zip(
                    samples["latitude"].tolist(),
                    samples["longitude"].tolist(),
                    samples["country"].tolist(),
                )
            ],
            dtype=np.int64,
        )

        date_index = DateIndex.from_dates(samples["date"])
        samples["date_index"] = date_index.indices_for(samples["date"])

        matrices = self.aggregator.aggregate(samples, registry, date_index)
        query = QueryEngine(matrices, unknown_country=self.config.query.unknown_country)
        return _LoadedState(ingest, registry, date_index, matrices, query)

    def _install(self, state: _LoadedState) -> None:
        if self._playback is not None:
            self._playback.stop()

        self._state = state
        self._playback = PlaybackController(
            date_count=len(state.date_index),
            period_ms=self.config.playback.period_ms,
            on_tick=self._dispatch_tick,
        )

        if state.ingest.is_empty:
            logger.warning(
                "Empty dataset: no valid rows (%d dropped); queries return empty results",
                state.ingest.dropped_rows,
            )
        else:
            dates = state.date_index.dates
            logger.info(
                "Loaded %d locations, %d dates (%s .. %s)",
                len(state.registry), len(dates),
                dates[0].strftime(self.config.display.date_format),
                dates[-1].strftime(self.config.display.date_format),
            )

        if self.config.playback.autoplay and not state.ingest.is_empty:
            self._playback.play()

    def _dispatch_tick(self, index: int) -> None:
        if self.on_tick is not None:
            self.on_tick(index)

    def _require_state(self) -> _LoadedState:
        if self._state is None:
            raise DataNotLoaded("Engine queried before a dataset was loaded")
        return self._state

    # ------------------------------------------------------------------
    # Dataset info
    # ------------------------------------------------------------------

    @property
    def is_loaded(self) -> bool:
        return self._state is not None

    @property
    def is_empty(self) -> bool:
        return self._require_state().ingest.is_empty

    @property
    def ingest_report(self) -> IngestResult:
        return self._require_state().ingest

    @property
    def matrices(self) -> xr.Dataset:
        return self._require_state().matrices

    @property
    def location_count(self) -> int:
        return len(self._require_state().registry)

    @property
    def locations(self) -> list[Location]:
        return list(self._require_state().registry)

    def location_projection(self, index: int) -> tuple[float, float, float]:
        """Fixed sphere position of a location."""
        return self._require_state().registry[index].position

    def projections(self) -> np.ndarray:
        """All location positions, shape (location_count, 3)."""
        return self._require_state().registry.positions()

    @property
    def date_count(self) -> int:
        return len(self._require_state().date_index)

    @property
    def dates(self) -> pd.DatetimeIndex:
        return self._require_state().date_index.dates

    def date_label(self, index: int) -> str:
        """Human-readable date label. Raises DateIndexOutOfRange."""
        return self._require_state().date_index.label(index, self.config.display.date_format)

    def date_index_of(self, timestamp) -> int:
        return self._require_state().date_index.index_of(timestamp)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def current_values(self, date_index: int, mode: DisplayMode | str | None = None) -> np.ndarray:
        """Dense per-location values for ``date_index`` (non-negative)."""
        mode = mode or self.config.query.mode
        return self._require_state().query.values_for_date(date_index, mode)

    def country_totals(self, date_index: int, mode: DisplayMode | str | None = None) -> dict[str, int]:
        values = self.current_values(date_index, mode)
        return self._require_state().query.country_totals(values)

    def top_countries(
        self,
        date_index: int,
        mode: DisplayMode | str | None = None,
        n: Optional[int] = None,
    ) -> list[tuple[str, int]]:
        """Ranked ``(country, total)`` pairs for one date."""
        mode = mode or self.config.query.mode
        n = self.config.query.top_n if n is None else n
        return self._require_state().query.top_countries(date_index, mode, n)

    def marker_scales(self, date_index: int, mode: DisplayMode | str | None = None) -> np.ndarray:
        """Per-location marker sizes for renderers."""
        values = self.current_values(date_index, mode)
        return marker_scales(values, self.config.query.base_marker_size)

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    @property
    def playback(self) -> PlaybackController:
        self._require_state()
        return self._playback

    @property
    def current_index(self) -> int:
        return self.playback.current_index

    def play(self, period_ms: Optional[int] = None) -> None:
        self.playback.play(period_ms)

    def stop(self) -> None:
        """Stop playback. Safe to call before load and multiple times."""
        if self._playback is not None:
            self._playback.stop()

    def set_period(self, period_ms: int) -> None:
        self.playback.set_period(period_ms)

    def advance(self) -> int:
        return self.playback.advance()

    def seek(self, index: int) -> int:
        return self.playback.seek(index)
