"""
explosive Test Suite

Tests for the recursive ADF engine, the critical value engines, the inference
layer, the bubble simulations and the configuration system.
"""
