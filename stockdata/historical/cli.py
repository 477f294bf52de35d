import json
import sys

from stockdata.api.params import parse_ratio_type
from stockdata.ingestion.dataset import load_dataset
from .summary import summarize
from .window import RelativeWindow, project, select


def main():
    if len(sys.argv) < 3:
        print("Usage: python -m stockdata.historical.cli <co_code> <pe|pb|ps> [timeframe]")
        sys.exit(2)
    co_code = sys.argv[1]
    ratio = parse_ratio_type(sys.argv[2])
    if ratio is None:
        print(f"Invalid type: {sys.argv[2]}")
        sys.exit(2)
    token = sys.argv[3] if len(sys.argv) > 3 else None

    ds = load_dataset()
    company = ds.ratios.get(co_code)
    if company is None:
        print(f"No data found for company code: {co_code}")
        sys.exit(1)

    series = project(select(company, RelativeWindow(token)), ratio, label="value")
    stats = summarize([p["value"] for p in series if p["value"] is not None])
    print(json.dumps({
        "co_code": co_code,
        "type": ratio,
        "timeframe": RelativeWindow(token).normalized,
        "count": len(series),
        "statistics": stats.to_dict() if stats else None,
    }, indent=2))


if __name__ == "__main__":
    main()
