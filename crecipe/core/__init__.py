# SPDX-License-Identifier: MIT
"""Core data model: paths, rules, languages, compile requirements, targets."""
