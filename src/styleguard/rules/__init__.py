"""Conformance rules, one module per rule family."""
