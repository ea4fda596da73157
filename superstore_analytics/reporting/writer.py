"""
Report Writer

Presentation layer: turns computed sections and the model summary into
files. Reads only plain tables; nothing here feeds back into the analysis.

Output layout:
    <output_dir>/tables/<section>.csv
    <output_dir>/heatmaps/<section>.png
    <output_dir>/model.json
    <output_dir>/quality.json
"""

from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union
import json

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import polars as pl
import seaborn as sns
import structlog

from superstore_analytics.analytics.sections import SectionResult
from superstore_analytics.config.settings import ReportSettings

if TYPE_CHECKING:
    from superstore_analytics.pipeline import AnalysisReport

logger = structlog.get_logger(__name__)


class ReportWriter:
    """
    Writes report artifacts to a directory.

    Example:
        writer = ReportWriter("reports/")
        paths = writer.write(report)
    """

    def __init__(
        self,
        output_dir: Union[str, Path, None] = None,
        settings: Optional[ReportSettings] = None,
    ):
        self.settings = settings or ReportSettings()
        self.output_dir = Path(output_dir or self.settings.output_dir)

    def _ensure_dir(self, name: str) -> Path:
        path = self.output_dir / name
        path.mkdir(parents=True, exist_ok=True)
        return path

    def write_table(self, name: str, table: pl.DataFrame) -> Path:
        """Write one aggregate as CSV"""
        path = self._ensure_dir("tables") / f"{name}.csv"
        table.write_csv(path)
        return path

    def render_heatmap(self, result: SectionResult) -> Path:
        """Render the wide matrix of a heatmap section; unobserved cells stay blank"""
        if result.matrix is None:
            raise ValueError(f"Section '{result.section.name}' has no matrix")

        index = result.section.group_by[0]
        frame = result.matrix.to_pandas().set_index(index)
        frame.index = frame.index.astype(str)

        width = max(6.0, 0.6 * len(frame.columns) + 2)
        height = max(3.0, 0.5 * len(frame.index) + 1.5)
        fig, ax = plt.subplots(figsize=(width, height))
        try:
            sns.heatmap(
                frame.astype(float),
                ax=ax,
                cmap=self.settings.heatmap_cmap,
                center=0,
                annot=True,
                fmt=".0f",
                annot_kws={"fontsize": 7},
                linewidths=0.5,
                cbar_kws={"label": result.section.heatmap_value},
            )
            ax.set_title(result.section.title, fontsize=12, fontweight="bold")
            ax.set_xlabel(result.section.group_by[1])
            ax.set_ylabel(index)
            fig.tight_layout()

            path = self._ensure_dir("heatmaps") / f"{result.section.name}.png"
            fig.savefig(path, dpi=self.settings.heatmap_dpi)
        finally:
            plt.close(fig)
        return path

    def write_json(self, name: str, payload: Dict[str, Any]) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / name
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2, default=str)
        return path

    def write_sections(self, sections: Dict[str, SectionResult]) -> List[Path]:
        """Write every section table and, when enabled, its heatmap"""
        paths = []
        for name, result in sections.items():
            paths.append(self.write_table(name, result.table))
            if result.matrix is not None and self.settings.render_heatmaps:
                paths.append(self.render_heatmap(result))
        return paths

    def write(self, report: "AnalysisReport") -> List[Path]:
        """
        Write the complete report.

        Returns:
            Paths of every file written
        """
        paths = self.write_sections(report.sections)

        if report.model is not None:
            model_payload = {"status": "fitted", **report.model.summary()}
        elif report.model_error is not None:
            model_payload = {"status": "failed", "error": report.model_error}
        else:
            model_payload = {"status": "skipped"}
        paths.append(self.write_json("model.json", model_payload))

        paths.append(self.write_json("quality.json", report.quality_summary()))

        logger.info("Report written", output_dir=str(self.output_dir), files=len(paths))
        return paths
