"""Configuration, logging, and execution primitives."""
