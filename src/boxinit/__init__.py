# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""In-container bootstrap agent.

Turns a freshly started container into a host-integrated login
environment: reconciles the host user, ensures shell dependencies,
bridges host paths and sockets, then idles or hands off to init.
"""

__version__ = "0.3.0"
