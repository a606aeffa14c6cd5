"""
Visualization helpers for fused networks and clustering results.

These functions return Matplotlib figures so they can be embedded in
notebooks or saved by the caller; none of them writes files.
"""

from __future__ import annotations

from typing import Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns


__all__ = ["affinity_heatmap", "agreement_barplot", "embedding_scatter"]


def affinity_heatmap(
    affinity: np.ndarray,
    labels: Optional[np.ndarray] = None,
    *,
    title: str = "Fused affinity",
    cmap: str = "viridis",
    figsize: Optional[Sequence[float]] = None,
    hide_diagonal: bool = True,
) -> plt.Figure:
    """
    Heatmap of an affinity matrix with samples grouped by cluster label.

    Cluster boundaries are drawn as white lines. The diagonal is masked by
    default because self-affinity conventions differ between matrices.
    """

    W = np.asarray(affinity, dtype=np.float64)
    if W.ndim != 2 or W.shape[0] != W.shape[1]:
        raise ValueError("affinity must be a square matrix.")

    if labels is None:
        order = np.arange(W.shape[0])
    else:
        labels = np.asarray(labels)
        if labels.shape != (W.shape[0],):
            raise ValueError("labels must have one entry per sample.")
        order = np.argsort(labels, kind="stable")
    ordered = W[np.ix_(order, order)]

    mask = np.eye(W.shape[0], dtype=bool) if hide_diagonal else None
    fig, ax = plt.subplots(figsize=figsize or (7, 6))
    sns.heatmap(
        ordered,
        mask=mask,
        cmap=cmap,
        square=True,
        xticklabels=False,
        yticklabels=False,
        cbar_kws={"label": "affinity"},
        ax=ax,
    )

    if labels is not None:
        sorted_labels = labels[order]
        boundaries = np.flatnonzero(sorted_labels[1:] != sorted_labels[:-1]) + 1
        for boundary in boundaries:
            ax.axhline(boundary, color="white", linewidth=1.0)
            ax.axvline(boundary, color="white", linewidth=1.0)

    ax.set_title(title)
    fig.tight_layout()
    return fig


def agreement_barplot(
    report: pd.DataFrame,
    *,
    metrics: Sequence[str] = ("RI", "ARI", "NMI", "Jaccard"),
    palette: str = "tab10",
    figsize: Optional[Sequence[float]] = None,
) -> plt.Figure:
    """
    Grouped bar chart of agreement statistics, one group per method.
    """

    missing = [metric for metric in metrics if metric not in report.columns]
    if missing:
        raise KeyError(f"Metrics not found in report: {missing}")

    frame = report.loc[:, list(metrics)].copy()
    frame.index.name = "method"
    long = frame.reset_index().melt(id_vars="method", var_name="metric", value_name="score")

    fig, ax = plt.subplots(figsize=figsize or (max(6, 1.2 * len(frame)), 4.5))
    sns.barplot(data=long, x="method", y="score", hue="metric", palette=palette, ax=ax)
    ax.axhline(0.0, color="black", linewidth=0.8)
    ax.set_ylabel("agreement with reference")
    ax.set_xlabel("")
    ax.tick_params(axis="x", rotation=45)
    ax.grid(True, axis="y", linestyle="--", linewidth=0.5, alpha=0.5)
    fig.tight_layout()
    return fig


def embedding_scatter(
    embedding: np.ndarray,
    labels: np.ndarray,
    *,
    title: str = "Spectral embedding",
    figsize: Optional[Sequence[float]] = None,
    cmap: str = "tab20",
    marker_size: float = 20.0,
) -> plt.Figure:
    """
    Scatter of the first two spectral embedding coordinates coloured by cluster.
    """

    coords = np.asarray(embedding)
    if coords.ndim != 2 or coords.shape[1] < 2:
        raise ValueError("embedding must have at least two columns.")

    fig, ax = plt.subplots(figsize=figsize or (7, 6))
    scatter = ax.scatter(
        coords[:, 0],
        coords[:, 1],
        c=labels,
        cmap=cmap,
        s=marker_size,
        alpha=0.8,
        edgecolors="none",
    )
    ax.set_xlabel("eigenvector 1")
    ax.set_ylabel("eigenvector 2")
    ax.set_title(title)
    ax.grid(True, linestyle="--", linewidth=0.5, alpha=0.5)
    fig.colorbar(scatter, ax=ax, label="cluster id")
    fig.tight_layout()
    return fig
