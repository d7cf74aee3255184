#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Legacy entry point for the explosive package.

All metadata lives in pyproject.toml; this file only lets older tooling run
``python setup.py develop``.
"""

import setuptools

if __name__ == "__main__":
    setuptools.setup()
