# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
