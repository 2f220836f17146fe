"""Tests for ExperimentSession selection state and derived views."""

import asyncio

import pytest

from metricview.config import reset_resource_limits
from metricview.session import ExperimentSession


class TestInitialState:
    def test_empty_session(self) -> None:
        session = ExperimentSession()

        assert dict(session.experiments) == {}
        assert session.selected_experiment_ids == frozenset()
        assert session.selected_metrics == frozenset()
        assert session.metric_filter == ""
        assert session.all_metrics == []
        assert session.chart_series == []
        assert session.total_data_points == 0
        assert session.upload_status.model_dump() == {"loading": False, "error": None, "success": False}


class TestIngest:
    @pytest.mark.asyncio
    async def test_success_outcome(self, sample_csv) -> None:
        session = ExperimentSession()

        outcome = await session.ingest(sample_csv.encode())

        assert outcome.success
        assert outcome.experiments_count == 3
        assert outcome.total_rows == 12
        assert outcome.error is None
        assert session.upload_status.success
        assert session.total_data_points == 12

    @pytest.mark.asyncio
    async def test_success_clears_selections(self, loaded_session, sample_csv) -> None:
        loaded_session.select_all_experiments()
        loaded_session.select_all_metrics()
        loaded_session.set_metric_filter("acc")

        await loaded_session.ingest(sample_csv.encode())

        assert loaded_session.selected_experiment_ids == frozenset()
        assert loaded_session.selected_metrics == frozenset()
        assert loaded_session.metric_filter == ""

    @pytest.mark.asyncio
    async def test_success_replaces_collection(self, loaded_session) -> None:
        await loaded_session.ingest(b"experiment_id,metric_name,step,value\nother,acc,0,1\n")

        assert list(loaded_session.experiments) == ["other"]
        assert loaded_session.total_data_points == 1

    @pytest.mark.asyncio
    async def test_failure_leaves_state_untouched(self, loaded_session) -> None:
        before = loaded_session.experiments
        loaded_session.toggle_experiment("baseline")
        loaded_session.toggle_metric("loss")
        loaded_session.set_metric_filter("lo")

        outcome = await loaded_session.ingest(b"experiment_id,metric_name,step,value\nx,acc,0,1\nx,acc,-1,1\n")

        assert not outcome.success
        assert outcome.error == "Row 2: step must be a non-negative number"
        assert outcome.experiments_count is None
        assert loaded_session.experiments is before
        assert loaded_session.selected_experiment_ids == {"baseline"}
        assert loaded_session.selected_metrics == {"loss"}
        assert loaded_session.metric_filter == "lo"
        status = loaded_session.upload_status
        assert not status.loading
        assert not status.success
        assert status.error == outcome.error

    @pytest.mark.asyncio
    async def test_missing_column_failure(self, loaded_session) -> None:
        outcome = await loaded_session.ingest(b"experiment_id,metric_name,step\ne1,acc,0\n")

        assert outcome.error == "Missing required columns: value"
        assert set(loaded_session.experiments) == {"baseline", "wide_lr", "dropout"}

    @pytest.mark.asyncio
    async def test_unexpected_error_is_reported(self, loaded_session, monkeypatch) -> None:
        async def broken_parse_csv(source):
            raise RuntimeError("worker thread died")

        monkeypatch.setattr("metricview.session.parse_csv", broken_parse_csv)

        outcome = await loaded_session.ingest(b"anything")

        assert not outcome.success
        assert outcome.error == "worker thread died"
        status = loaded_session.upload_status
        assert not status.loading
        assert status.error == "worker thread died"
        assert set(loaded_session.experiments) == {"baseline", "wide_lr", "dropout"}

    @pytest.mark.asyncio
    async def test_invalid_limit_setting_is_reported(self, loaded_session, monkeypatch, sample_csv) -> None:
        monkeypatch.setenv("METRICVIEW_MAX_FILE_SIZE", "big")
        reset_resource_limits()

        outcome = await loaded_session.ingest(sample_csv.encode())

        assert not outcome.success
        assert outcome.error.startswith("Invalid resource limits configuration:")
        assert not loaded_session.upload_status.loading
        assert loaded_session.upload_status.error == outcome.error

    def test_collection_is_read_only(self, loaded_session) -> None:
        with pytest.raises(TypeError):
            loaded_session.experiments["new"] = loaded_session.experiments["baseline"]

    def test_clear_all(self, loaded_session) -> None:
        loaded_session.select_all_experiments()
        loaded_session.set_metric_filter("x")

        loaded_session.clear_all()

        assert dict(loaded_session.experiments) == {}
        assert loaded_session.selected_experiment_ids == frozenset()
        assert loaded_session.metric_filter == ""
        assert not loaded_session.upload_status.success


class TestExperimentSelection:
    def test_toggle_is_involution(self, loaded_session) -> None:
        loaded_session.toggle_experiment("baseline")
        assert loaded_session.selected_experiment_ids == {"baseline"}

        loaded_session.toggle_experiment("baseline")
        assert loaded_session.selected_experiment_ids == frozenset()

    def test_toggle_clears_metric_selection(self, loaded_session) -> None:
        loaded_session.toggle_experiment("baseline")
        loaded_session.toggle_metric("loss")

        loaded_session.toggle_experiment("wide_lr")

        assert loaded_session.selected_experiment_ids == {"baseline", "wide_lr"}
        assert loaded_session.selected_metrics == frozenset()

    def test_toggle_unknown_experiment_is_ignored(self, loaded_session) -> None:
        loaded_session.toggle_experiment("baseline")
        loaded_session.toggle_metric("loss")

        loaded_session.toggle_experiment("nope")

        assert loaded_session.selected_experiment_ids == {"baseline"}
        assert loaded_session.selected_metrics == {"loss"}

    def test_select_all_experiments(self, loaded_session) -> None:
        loaded_session.toggle_metric("loss")

        loaded_session.select_all_experiments()

        assert loaded_session.selected_experiment_ids == {"baseline", "wide_lr", "dropout"}
        assert loaded_session.selected_metrics == frozenset()

    def test_clear_experiment_selection(self, loaded_session) -> None:
        loaded_session.select_all_experiments()
        loaded_session.select_all_metrics()
        loaded_session.set_metric_filter("a")

        loaded_session.clear_experiment_selection()

        assert loaded_session.selected_experiment_ids == frozenset()
        assert loaded_session.selected_metrics == frozenset()
        assert loaded_session.metric_filter == "a"

    def test_selected_experiments(self, loaded_session) -> None:
        loaded_session.toggle_experiment("wide_lr")
        loaded_session.toggle_experiment("baseline")

        assert [experiment.id for experiment in loaded_session.selected_experiments] == ["baseline", "wide_lr"]


class TestMetricSelection:
    def test_toggle_metric_is_involution(self, loaded_session) -> None:
        loaded_session.toggle_experiment("baseline")

        loaded_session.toggle_metric("loss")
        assert loaded_session.selected_metrics == {"loss"}
        loaded_session.toggle_metric("loss")
        assert loaded_session.selected_metrics == frozenset()
        assert loaded_session.selected_experiment_ids == {"baseline"}

    def test_select_all_metrics_is_sorted_union(self, loaded_session) -> None:
        loaded_session.toggle_experiment("baseline")
        loaded_session.toggle_experiment("wide_lr")

        loaded_session.select_all_metrics()

        assert loaded_session.selected_metrics == {"accuracy", "f1", "loss"}
        assert loaded_session.available_metrics_for_selection == ["accuracy", "f1", "loss"]

    def test_select_all_metrics_without_experiments(self, loaded_session) -> None:
        loaded_session.select_all_metrics()
        assert loaded_session.selected_metrics == frozenset()

    def test_clear_metric_selection_keeps_experiments(self, loaded_session) -> None:
        loaded_session.select_all_experiments()
        loaded_session.select_all_metrics()

        loaded_session.clear_metric_selection()

        assert loaded_session.selected_metrics == frozenset()
        assert len(loaded_session.selected_experiment_ids) == 3

    def test_clear_selections(self, loaded_session) -> None:
        loaded_session.select_all_experiments()
        loaded_session.select_all_metrics()
        loaded_session.set_metric_filter("loss")

        loaded_session.clear_selections()

        assert loaded_session.selected_experiment_ids == frozenset()
        assert loaded_session.selected_metrics == frozenset()
        assert loaded_session.metric_filter == ""
        assert len(loaded_session.experiments) == 3


class TestDerivedMetrics:
    def test_all_metrics_ignores_selection(self, loaded_session) -> None:
        assert loaded_session.all_metrics == ["accuracy", "f1", "loss", "val_loss"]
        loaded_session.toggle_experiment("dropout")
        assert loaded_session.all_metrics == ["accuracy", "f1", "loss", "val_loss"]

    def test_available_metrics_empty_without_selection(self, loaded_session) -> None:
        assert loaded_session.available_metrics_for_selection == []

    def test_available_metrics_for_selection(self, loaded_session) -> None:
        loaded_session.toggle_experiment("dropout")
        assert loaded_session.available_metrics_for_selection == ["val_loss"]

    def test_all_metrics_sort_is_case_sensitive(self) -> None:
        session = ExperimentSession()
        asyncio.run(session.ingest(b"experiment_id,metric_name,step,value\ne,b,0,1\ne,B,0,1\ne,a,0,1\n"))

        assert session.all_metrics == ["B", "a", "b"]

    def test_filtered_metrics_case_insensitive(self, loaded_session) -> None:
        loaded_session.select_all_experiments()

        loaded_session.set_metric_filter("LOSS")

        assert loaded_session.filtered_metrics == ["loss", "val_loss"]

    def test_filter_is_stored_verbatim(self, loaded_session) -> None:
        loaded_session.select_all_experiments()

        loaded_session.set_metric_filter(" loss ")

        assert loaded_session.metric_filter == " loss "
        assert loaded_session.filtered_metrics == []

    def test_empty_filter_returns_all_available(self, loaded_session) -> None:
        loaded_session.select_all_experiments()
        loaded_session.set_metric_filter("")
        assert loaded_session.filtered_metrics == loaded_session.available_metrics_for_selection


class TestChartSeries:
    def test_empty_without_metric_selection(self, loaded_session) -> None:
        loaded_session.select_all_experiments()
        assert loaded_session.chart_series == []

    def test_empty_without_experiment_selection(self, loaded_session) -> None:
        loaded_session.toggle_metric("loss")
        assert loaded_session.chart_series == []

    def test_one_series_per_pair_with_data(self, loaded_session) -> None:
        loaded_session.toggle_experiment("baseline")
        loaded_session.toggle_experiment("wide_lr")
        loaded_session.toggle_metric("accuracy")
        loaded_session.toggle_metric("f1")

        series = loaded_session.chart_series

        assert [(s.experiment_id, s.metric_name) for s in series] == [
            ("baseline", "accuracy"),
            ("wide_lr", "accuracy"),
            ("wide_lr", "f1"),
        ]
        assert series[0].points == [(0, 0.12), (1, 0.45), (2, 0.78)]
        assert series[0].steps == [0, 1, 2]
        assert series[2].values == [0.40]

    def test_stale_metrics_yield_no_series(self, loaded_session) -> None:
        loaded_session.toggle_experiment("dropout")
        loaded_session.toggle_metric("accuracy")

        assert loaded_session.selected_metrics == {"accuracy"}
        assert loaded_session.chart_series == []

    def test_views_track_state_changes(self, loaded_session) -> None:
        loaded_session.toggle_experiment("baseline")
        loaded_session.toggle_metric("loss")
        assert len(loaded_session.chart_series) == 1

        loaded_session.toggle_metric("accuracy")
        assert len(loaded_session.chart_series) == 2

        loaded_session.clear_metric_selection()
        assert loaded_session.chart_series == []
