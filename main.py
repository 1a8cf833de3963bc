import argparse
import logging
import sys

from inventory_planner import settings
from inventory_planner.aggregation import ForecastViewState
from inventory_planner.exceptions import ConfigurationError
from inventory_planner.logger import setup_logger
from inventory_planner.pipelines.forecast import ForecastPipeline
from inventory_planner.pipelines.performance import PerformancePipeline
from inventory_planner.pipelines.purchase_orders import PurchaseOrderPipeline


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inventory planning reports.")
    parser.add_argument(
        "report",
        choices=["forecast", "purchase-orders", "performance"],
        help="Which report to build.",
    )
    parser.add_argument(
        "--group-by",
        choices=settings.GROUP_BY_OPTIONS,
        default="sku",
        help="Roll the forecast / performance rows up by this field.",
    )
    parser.add_argument(
        "--sort-by",
        choices=settings.SUPPLIER_SORT_OPTIONS,
        default="total_amount",
        help="Supplier ranking for the purchase-orders report.",
    )
    parser.add_argument("--oos-only", action="store_true", help="Only SKUs that run out of stock.")
    parser.add_argument("--search", default="", help="Filter SKUs by id or name.")
    parser.add_argument("--test", action="store_true", help="Skip the webhook post.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger("inventory_planner")

    if args.report == "forecast":
        view = ForecastViewState(group_by=args.group_by, oos_only=args.oos_only, search_term=args.search)
        pipeline = ForecastPipeline(view=view, test_mode=args.test)
    elif args.report == "purchase-orders":
        pipeline = PurchaseOrderPipeline(sort_by=args.sort_by, test_mode=args.test)
    else:
        pipeline = PerformancePipeline(group_by=args.group_by, test_mode=args.test)

    try:
        result = pipeline.run()
    except ConfigurationError as e:
        logging.getLogger("inventory_planner").error(f"❌ {e}")
        return 2
    return 0 if result is not None else 1


if __name__ == "__main__":
    sys.exit(main())
