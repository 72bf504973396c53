"""BigQuery metadata models, their SQLite cache and a caching client wrapper."""