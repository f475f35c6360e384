"""CLI 命令行界面模块。

该模块提供基于 Typer 的命令行工具，对 CSV/Parquet 数据文件执行相关性分析。
"""

import json
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd
import typer

from corrmap.config import Settings
from corrmap.correlate import correlate_matrix, correlate_target, correlate_target_map
from corrmap.errors import CorrmapError
from corrmap.logging_ import configure_logging
from corrmap.tools.dataframe.io import load_dataframe, preview_dataframe, save_dataframe
from corrmap.tools.parallel.pool import WorkerPool

app = typer.Typer(help="Pairwise Pearson correlation CLI")

SELECT_HELP = "Columns to correlate, repeatable or comma-separated. Defaults to all numeric columns."
FILTER_HELP = "Row filter as column=value1,value2. Repeatable; values across filters are cross-joined."
LOGICAL_HELP = "Size the worker pool by logical rather than physical cores."


def _split(values: Optional[List[str]]) -> Optional[List[str]]:
    if not values:
        return None
    return [item.strip() for value in values for item in value.split(",") if item.strip()]


def _parse_filters(filters: Optional[List[str]]) -> Optional[Dict[str, List[str]]]:
    """解析 ``col=v1,v2`` 形式的过滤条件。"""
    if not filters:
        return None
    parsed: Dict[str, List[str]] = {}
    for item in filters:
        name, sep, values = item.partition("=")
        if not sep or not name.strip():
            raise typer.BadParameter(f"Filter must look like column=value1,value2: {item!r}")
        parsed.setdefault(name.strip(), []).extend(v.strip() for v in values.split(",") if v.strip())
    return parsed


def _context() -> Settings:
    settings = Settings()
    try:
        configure_logging(settings)
    except CorrmapError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    return settings


def _emit(result: pd.DataFrame, output: Optional[Path]) -> None:
    if output:
        path = save_dataframe(result, output)
        typer.echo(f"Wrote {len(result)} rows to {path}")
        return
    typer.echo(json.dumps(preview_dataframe(result, max_rows=20), ensure_ascii=False, indent=2, default=str))


def _pool(settings: Settings, logical_cores: bool) -> WorkerPool:
    return WorkerPool(
        settings.max_workers,
        settings.worker_backend,
        use_logical_units=logical_cores or settings.use_logical_cores,
    )


def _load(dataset: Path, metadata: Optional[Path], key: Optional[str]):
    data = load_dataframe(dataset, key=key)
    meta = load_dataframe(metadata, key=key) if metadata else None
    return data, meta


@app.command()
def matrix(
    dataset: Path = typer.Argument(..., exists=True, help="CSV or Parquet dataset."),
    select: Optional[List[str]] = typer.Option(None, "--select", "-s", help=SELECT_HELP),
    filters: Optional[List[str]] = typer.Option(None, "--filter", "-f", help=FILTER_HELP),
    metadata: Optional[Path] = typer.Option(None, "--metadata", exists=True, help="Metadata table to filter by."),
    key: Optional[str] = typer.Option(None, "--key", help="Key column shared by dataset and metadata."),
    self_corr: Optional[str] = typer.Option(None, "--self", help="Keep self-correlations: yes or no."),
    method: Optional[str] = typer.Option(None, "--method", help="p-value adjustment method."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write result to CSV or Parquet."),
):
    """计算数据集所选列两两之间的相关性。"""
    settings = _context()
    try:
        data, meta = _load(dataset, metadata, key)
        result = correlate_matrix(
            data,
            select_cols=_split(select),
            filter_rows=_parse_filters(filters),
            metadata=meta,
            self_corr=self_corr or settings.self_corr,
            method=method or settings.method,
        )
    except CorrmapError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    _emit(result, output)


@app.command()
def target(
    dataset: Path = typer.Argument(..., exists=True, help="CSV or Parquet dataset."),
    target_col: str = typer.Argument(..., metavar="TARGET", help="Target column."),
    select: Optional[List[str]] = typer.Option(None, "--select", "-s", help=SELECT_HELP),
    filters: Optional[List[str]] = typer.Option(None, "--filter", "-f", help=FILTER_HELP),
    metadata: Optional[Path] = typer.Option(None, "--metadata", exists=True, help="Metadata table to filter by."),
    key: Optional[str] = typer.Option(None, "--key", help="Key column shared by dataset and metadata."),
    self_corr: Optional[str] = typer.Option(None, "--self", help="Keep self-correlations: yes or no."),
    method: Optional[str] = typer.Option(None, "--method", help="p-value adjustment method."),
    parallel: bool = typer.Option(False, "--parallel/--no-parallel", help="Run on a worker pool."),
    logical_cores: bool = typer.Option(False, "--logical-cores", help=LOGICAL_HELP),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write result to CSV or Parquet."),
):
    """计算单个目标列与所选列的相关性。"""
    settings = _context()
    kwargs = dict(
        select_cols=_split(select),
        filter_rows=_parse_filters(filters),
        self_corr=self_corr or settings.self_corr,
        method=method or settings.method,
    )
    try:
        data, meta = _load(dataset, metadata, key)
        kwargs["metadata"] = meta
        if parallel:
            with _pool(settings, logical_cores) as pool:
                result = correlate_target(data, target_col, pool=pool, **kwargs)
        else:
            result = correlate_target(data, target_col, **kwargs)
    except CorrmapError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    _emit(result, output)


@app.command()
def targets(
    dataset: Path = typer.Argument(..., exists=True, help="CSV or Parquet dataset."),
    target_cols: List[str] = typer.Argument(..., metavar="TARGETS...", help="Two or more target columns."),
    select: Optional[List[str]] = typer.Option(None, "--select", "-s", help=SELECT_HELP),
    filters: Optional[List[str]] = typer.Option(None, "--filter", "-f", help=FILTER_HELP),
    metadata: Optional[Path] = typer.Option(None, "--metadata", exists=True, help="Metadata table to filter by."),
    key: Optional[str] = typer.Option(None, "--key", help="Key column shared by dataset and metadata."),
    self_corr: Optional[str] = typer.Option(None, "--self", help="Keep self-correlations: yes or no."),
    method: Optional[str] = typer.Option(None, "--method", help="p-value adjustment method."),
    adjust: Optional[str] = typer.Option(None, "--adjust", help="Adjustment scope: global or per_target."),
    strict: bool = typer.Option(False, "--strict", help="Fail when any target fails."),
    parallel: bool = typer.Option(True, "--parallel/--no-parallel", help="Run targets on a worker pool."),
    logical_cores: bool = typer.Option(False, "--logical-cores", help=LOGICAL_HELP),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write result to CSV or Parquet."),
):
    """并行计算多个目标列与所选列的相关性。"""
    settings = _context()
    kwargs = dict(
        select_cols=_split(select),
        filter_rows=_parse_filters(filters),
        self_corr=self_corr or settings.self_corr,
        method=method or settings.method,
        adjust=adjust or settings.adjust,
        strict=strict,
    )
    try:
        data, meta = _load(dataset, metadata, key)
        kwargs["metadata"] = meta
        if parallel:
            with _pool(settings, logical_cores) as pool:
                result = correlate_target_map(data, _split(target_cols), pool=pool, **kwargs)
        else:
            result = correlate_target_map(data, _split(target_cols), **kwargs)
    except CorrmapError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    _emit(result, output)


if __name__ == "__main__":
    app()
