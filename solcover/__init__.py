# We use RsT document formatting in docstring. For example :param to mark parameters.
# See PEP 287
__docformat__ = "restructuredtext"
import logging

# Accept solcover.VERSION to get solcover's current version number
from .__version__ import __version__ as VERSION  # NOQA
from solcover.coverage.project import ProjectCoverage  # NOQA
from solcover.coverage.source_file import SourceFileCoverage  # NOQA

log = logging.getLogger(__name__)
