# SPDX-License-Identifier: MIT
"""Package manifests, descriptors and pkg-config resolution."""
