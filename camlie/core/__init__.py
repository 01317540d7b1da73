"""Core of camlie: math primitives, camera models and configuration models."""
