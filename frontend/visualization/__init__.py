from .charts import (
    ChartBuilder,
    ChartDataset,
    LineChartView,
    BarChartView,
    PieChartView,
    DashboardCharts,
)

__all__ = [
    'ChartBuilder',
    'ChartDataset',
    'LineChartView',
    'BarChartView',
    'PieChartView',
    'DashboardCharts',
]
