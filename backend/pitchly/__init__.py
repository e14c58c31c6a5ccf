"""
pitchly — Valuation backend for the Pitchly dashboard.

Normalizes ticker summaries into Quotes and runs the DCF/DDM, LBO and peer
comparison engines behind a FastAPI app (`pitchly.main:app`).
"""
