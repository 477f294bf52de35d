"""Static dataset loading: ratios and OHLC records keyed by company code."""
