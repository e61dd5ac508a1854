"""
Consumption chart rendering
"""
import io

# Matplotlib imports for chart generation
import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend
import matplotlib.pyplot as plt

PERIOD_TITLES = {
    'day': 'Water Consumption - Daily',
    'month': 'Water Consumption - Monthly',
    'year': 'Water Consumption - Yearly',
}

def chart_summary(points):
    """Count, total and peak of a consumption series"""
    values = [p.consumption for p in points]
    return {
        'count': len(values),
        'total': sum(values),
        'peak': max(values, default=0.0),
    }

def render_consumption_chart(points, period='day'):
    """
    Bar chart of consumption points as PNG bytes.
    Returns None when there is nothing to plot.
    """
    if not points:
        return None

    labels = [p.time for p in points]
    values = [p.consumption for p in points]
    max_y = max(values)

    fig, ax = plt.subplots(figsize=(10, 6), dpi=100)
    try:
        ax.bar(range(len(values)), values, color='#0197F6', width=0.6, zorder=2)

        # Headroom above the tallest bar
        if max_y > 0:
            ax.set_ylim(0, max_y * 1.2)

        ax.set_xticks(range(len(labels)))
        ax.set_xticklabels(labels, rotation=45, ha='right', fontsize=9)
        ax.set_title(PERIOD_TITLES.get(period, 'Water Consumption'), fontsize=16, pad=20)
        ax.set_xlabel('Time', fontsize=12)
        ax.set_ylabel('Consumption', fontsize=12)
        ax.grid(True, axis='y', alpha=0.3, linewidth=0.8, zorder=0)

        fig.tight_layout()

        buf = io.BytesIO()
        fig.savefig(buf, format='png', bbox_inches='tight', dpi=100)
        return buf.getvalue()
    finally:
        plt.close(fig)
