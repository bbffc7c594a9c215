# SPDX-License-Identifier: MIT
"""Toolchain abstraction."""
