# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Bootstrap pipeline: every phase between argument parsing and the terminal.

Importing this package registers all steps with the pipeline.
"""

from ..context import BootstrapContext
from ..pipeline import Pipeline

bootstrap_pipeline = Pipeline[BootstrapContext]("bootstrap")

# Import step modules so their decorators register with the pipeline.
from . import preconditions as _  # noqa: F401, E402
from . import hooks as _  # noqa: F401, E402
from . import dependencies as _  # noqa: F401, E402
from . import host_mounts as _  # noqa: F401, E402
from . import host_sockets as _  # noqa: F401, E402
from . import exclusions as _  # noqa: F401, E402
from . import account as _  # noqa: F401, E402
from . import configure_sudo as _  # noqa: F401, E402
from . import credentials as _  # noqa: F401, E402
from . import skeleton as _  # noqa: F401, E402
from . import resources as _  # noqa: F401, E402
