"""Domain layer for finops: entities, query engine, services, aggregation and exports."""
