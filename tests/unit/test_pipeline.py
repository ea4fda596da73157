"""
Unit Tests - Analysis Pipeline
"""
import pytest

from superstore_analytics.analytics.sections import REPORT_SECTIONS
from superstore_analytics.errors import DataQualityWarning, IncompleteDataError
from superstore_analytics.pipeline import AnalysisPipeline, run_analysis
from superstore_analytics.schema import FEATURE_COLUMNS, ORDER_LINE_COLUMNS


@pytest.fixture(scope="module")
def generated_report(generated_csv, test_settings):
    return AnalysisPipeline(test_settings).run(generated_csv)


class TestAnalysisPipeline:
    """Tests for AnalysisPipeline"""

    def test_full_run(self, generated_report):
        report = generated_report

        assert report.input_rows == 1500
        assert list(report.sections) == [s.name for s in REPORT_SECTIONS]
        assert report.model is not None
        assert report.model_error is None
        assert report.completed_at is not None
        assert report.duration_seconds >= 0

    def test_table_carries_features_and_residuals(self, generated_report):
        columns = generated_report.table.columns

        assert columns[:len(ORDER_LINE_COLUMNS)] == list(ORDER_LINE_COLUMNS)
        assert columns[-2:] == ["fitted_profit", "residual"]
        for name in FEATURE_COLUMNS:
            assert name in columns

    def test_quality_summary(self, generated_report):
        summary = generated_report.quality_summary()

        assert summary["completion_rate"] == 1.0
        assert summary["incomplete_columns"] == []
        assert summary["categories"]["region"] == ["Central", "East", "South", "West"]
        assert summary["findings"] == []

    def test_singular_fit_keeps_aggregates(self, two_row_orders, test_settings):
        report = AnalysisPipeline(test_settings).run_frame(two_row_orders)

        table = report.sections["sub_category"].table
        assert dict(zip(table["sub_category"], table["profit_sum"])) == {"Chairs": 100.0, "Tables": -50.0}
        assert report.model is None
        assert "rank-deficient" in report.model_error
        assert "residual" not in report.table.columns

    def test_incomplete_input_aborts(self, make_orders, test_settings):
        df = make_orders({}, {"customer_id": None})

        with pytest.warns(DataQualityWarning):
            with pytest.raises(IncompleteDataError) as exc_info:
                AnalysisPipeline(test_settings).run_frame(df)

        assert exc_info.value.failing_columns == ["customer_id"]
        assert exc_info.value.completion_rate < 1.0

    def test_incomplete_input_allowed(self, make_orders, test_settings):
        df = make_orders({}, {"customer_id": None})

        with pytest.warns(DataQualityWarning):
            report = AnalysisPipeline(test_settings, fit_model=False, require_complete=False).run_frame(df)

        assert report.cleaning.completeness.failing_columns == ["customer_id"]
        assert report.sections["ship_mode_turnaround"].table["row_id_count"].sum() == 2

    def test_incomplete_model_inputs_do_not_block_sections(self, make_orders, test_settings):
        df = make_orders({}, {"sales": None}, {"profit": -5.0})

        with pytest.warns(DataQualityWarning):
            report = AnalysisPipeline(test_settings, fit_model=True, require_complete=False).run_frame(df)

        assert report.model is None
        assert "nulls" in report.model_error
        assert "residual" not in report.table.columns
        assert report.sections["segment"].table["profit_sum"].to_list() == [pytest.approx(41.9136 * 2 - 5.0)]

    def test_null_category_key_keeps_heatmaps(self, make_orders, test_settings):
        df = make_orders({}, {"sub_category": None})

        with pytest.warns(DataQualityWarning):
            report = AnalysisPipeline(test_settings, fit_model=False, require_complete=False).run_frame(df)

        assert report.sections["sub_category"].table["sub_category"].to_list().count(None) == 1
        matrix = report.sections["segment_by_sub_category"].matrix
        assert matrix.columns == ["segment", "Bookcases"]

    def test_model_disabled(self, sample_orders_df, test_settings):
        report = AnalysisPipeline(test_settings, fit_model=False).run_frame(sample_orders_df)

        assert report.model is None
        assert report.model_error is None
        assert report.table.columns[-len(FEATURE_COLUMNS):] == FEATURE_COLUMNS

    def test_run_analysis(self, sample_orders_df, write_raw_csv, test_settings):
        path = write_raw_csv(sample_orders_df)

        report = run_analysis(path, test_settings)

        assert report.source == str(path)
        assert report.input_rows == 6
