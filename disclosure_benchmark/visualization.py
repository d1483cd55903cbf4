"""
visualization.py - Figures for the loss/accuracy trade-off of the benchmark.
"""

import logging
from pathlib import Path
from typing import Dict, List, Tuple

import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
from scipy import stats

from .benchmark_setup import PrivacyModel
from .display_utils import model_display_name

logger = logging.getLogger(__name__)

# Publication-quality matplotlib settings
STYLE_CONFIG = {
    'font.family': 'sans-serif',
    'font.sans-serif': ['Arial', 'Helvetica', 'DejaVu Sans'],
    'font.size': 10,
    'axes.titlesize': 12,
    'axes.labelsize': 10,
    'xtick.labelsize': 9,
    'ytick.labelsize': 9,
    'legend.fontsize': 9,
    'figure.titlesize': 14,
    'figure.dpi': 100,
    'savefig.dpi': 300,
    'savefig.format': 'pdf',
    'savefig.bbox': 'tight',
    'axes.spines.top': False,
    'axes.spines.right': False,
}

# Color palette (colorblind-friendly)
COLORS = {
    PrivacyModel.K_ANONYMITY.value: '#666666',           # Dark gray
    PrivacyModel.T_CLOSENESS.value: '#2E86AB',           # Blue
    PrivacyModel.ENHANCED_B_LIKENESS.value: '#F6AE2D',   # Orange/Gold
    PrivacyModel.DISTINCT_L_DIVERSITY.value: '#E94F37',  # Red
}


class Visualizer:
    """Creates figures from the benchmark results table."""

    def __init__(
        self,
        output_dir: str = "results/figures",
        figsize: Tuple[float, float] = (7, 5),
        dpi: int = 300
    ):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.figsize = figsize
        self.dpi = dpi

        # Apply style
        plt.rcParams.update(STYLE_CONFIG)

        # Storage for generated figures
        self._figures: Dict[str, plt.Figure] = {}

        logger.info(f"Visualizer initialized, output_dir: {self.output_dir}")

    def plot_tradeoff(
        self,
        results: pd.DataFrame,
        title: str = "Information Loss vs. Classification Accuracy"
    ) -> plt.Figure:
        """Figure 1: loss/accuracy scatter per dataset, colored by privacy model."""
        datasets = list(results['dataset'].unique())
        if not datasets:
            logger.warning("No results to plot")
            return None

        fig, axes = plt.subplots(1, len(datasets), figsize=(5 * len(datasets), 4.5),
                                 sharey=True, squeeze=False)
        axes = axes[0]

        for ax, dataset in zip(axes, datasets):
            data = results[results['dataset'] == dataset]

            for model, color in COLORS.items():
                model_data = data[data['model'] == model]
                if len(model_data) == 0:
                    continue
                ax.scatter(model_data['quality_loss'], model_data['accuracy_lr_anon'],
                           s=18, alpha=0.6, color=color, edgecolor='none',
                           label=model_display_name(model))

            # Rank correlation over all transformations of the dataset
            if len(data) > 2 and data['quality_loss'].nunique() > 1:
                rho, p_value = stats.spearmanr(data['quality_loss'], data['accuracy_lr_anon'])
                ax.text(0.97, 0.97, f"Spearman ρ = {rho:.2f}\np = {p_value:.3g}",
                        transform=ax.transAxes, ha='right', va='top', fontsize=8,
                        bbox=dict(boxstyle='round', facecolor='white', edgecolor='#cccccc'))

            ax.set_xlabel('Information Loss', fontweight='bold')
            if ax is axes[0]:
                ax.set_ylabel('Accuracy (Logistic Regression)', fontweight='bold')
            ax.set_title(dataset, fontweight='bold')
            ax.set_xlim(-0.02, 1.02)
            ax.grid(True, alpha=0.3, linestyle='-', linewidth=0.5)

        axes[0].legend(loc='lower left', frameon=True, fancybox=False, edgecolor='gray')
        fig.suptitle(title, fontweight='bold', y=1.02)
        plt.tight_layout()

        self._figures['fig1_loss_accuracy_tradeoff'] = fig
        return fig

    def plot_threshold_sweep(
        self,
        results: pd.DataFrame,
        title: str = "Best Accuracy per Privacy Threshold"
    ) -> plt.Figure:
        """Figure 2: highest accuracy reached per threshold, one panel per model."""
        models = [m for m in COLORS if m in set(results['model'])]
        if not models:
            logger.warning("No results to plot")
            return None

        best = (
            results
            .groupby(['model', 'dataset', 'sensitive', 'threshold'])['accuracy_lr_anon']
            .max()
            .reset_index()
        )

        fig, axes = plt.subplots(1, len(models), figsize=(4 * len(models), 4),
                                 sharey=True, squeeze=False)
        axes = axes[0]
        palette = sns.color_palette('husl', best[['dataset', 'sensitive']].drop_duplicates().shape[0])
        series_colors = {
            key: color for key, color in zip(
                best[['dataset', 'sensitive']].drop_duplicates().itertuples(index=False, name=None),
                palette
            )
        }

        for ax, model in zip(axes, models):
            model_data = best[best['model'] == model]

            for (dataset, sensitive), series in model_data.groupby(['dataset', 'sensitive']):
                series = series.sort_values('threshold')
                ax.plot(series['threshold'], series['accuracy_lr_anon'], '-o',
                        color=series_colors[(dataset, sensitive)], linewidth=1.5,
                        markersize=4, label=f"{dataset}: {sensitive}")

            ax.set_xlabel('Threshold', fontweight='bold')
            if ax is axes[0]:
                ax.set_ylabel('Best Accuracy', fontweight='bold')
            ax.set_title(model_display_name(model), fontweight='bold')
            ax.legend(loc='lower right', fontsize=7)
            ax.grid(True, alpha=0.3)

        fig.suptitle(title, fontweight='bold', y=1.02)
        plt.tight_layout()

        self._figures['fig2_threshold_sweep'] = fig
        return fig

    def save_figure(
        self,
        fig: plt.Figure,
        name: str,
        formats: List[str] = ['pdf', 'png']
    ) -> List[str]:
        """Save figure in multiple formats. Returns list of saved paths."""
        saved_paths = []

        for fmt in formats:
            filepath = self.output_dir / f"{name}.{fmt}"
            fig.savefig(filepath, format=fmt, dpi=self.dpi, bbox_inches='tight',
                        facecolor='white', edgecolor='none')
            saved_paths.append(str(filepath))
            logger.info(f"Saved figure: {filepath}")

        return saved_paths

    def save_all_figures(
        self,
        formats: List[str] = ['pdf', 'png']
    ) -> Dict[str, List[str]]:
        """Save all generated figures. Returns dict of figure names to paths."""
        all_paths = {}

        for name, fig in self._figures.items():
            all_paths[name] = self.save_figure(fig, name, formats)

        logger.info(f"Saved {len(all_paths)} figures to {self.output_dir}")

        return all_paths

    def close_all(self) -> None:
        """Close all figures to free memory."""
        for fig in self._figures.values():
            plt.close(fig)
        self._figures.clear()


def create_tradeoff_figures(
    results: pd.DataFrame,
    output_dir: str = "results/figures",
    formats: List[str] = ['pdf', 'png']
) -> Dict[str, List[str]]:
    """Generate all trade-off figures. Returns dict of figure names to paths."""
    viz = Visualizer(output_dir=output_dir)

    viz.plot_tradeoff(results)
    viz.plot_threshold_sweep(results)

    paths = viz.save_all_figures(formats=formats)

    viz.close_all()

    return paths
