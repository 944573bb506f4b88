"""
Keyword Trends -- turns collected items into ranked, explainable trend signals.

Answers four questions about a collection cycle: which keywords are hot,
which are accelerating, which are spreading across independent sources,
and which sources talk about the same things.

Components:
  sources.py       -- Known sources/categories, tiers and scoring weights
  aggregator.py    -- Per-keyword frequency records from NormalizedItems
  scorer.py        -- Composite trend score, velocity, presentation views
  surge.py         -- Tiered surge alerts (spike / surge / explosion)
  cross_source.py  -- Spread detection, source correlation, viral ranking
  engine.py        -- Runs the whole pipeline into one AnalysisResult
"""
