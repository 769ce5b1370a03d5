"""Language adapters that turn source text into styleguard syntax trees."""
