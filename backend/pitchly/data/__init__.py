"""
data package — Quote acquisition and static reference tables.

Submodules:
    - normalizer: coercion of untyped payload values to floats.
    - reference: exchange tax rates, ticker domains, peers, scenario catalogue.
    - quote_client: ticker summary HTTP client (requests + tenacity).
    - yfinance_source: alternative provider backed by yfinance.
"""
