"""Pure domain layer: models, identifiers, references, lifecycle rules, metrics."""
