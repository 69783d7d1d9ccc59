"""NYC Jobs exploratory analysis package.

This package contains the stages of the batch analysis:
- common: input table loading and shared helpers
- salary: annualizes hourly/daily/annual pay into one comparable value
- aggregator: per-agency posting and position rankings
- text_frequency: word frequencies over qualification requirements
- geocoder: cached geocoding of work locations
- report: configuration, charts and the batch entry point
"""

__version__ = "0.1.0"
