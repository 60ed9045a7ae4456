"""pixiquant CLI — Click commands and Rich console helpers."""
