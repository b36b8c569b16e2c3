"""Libraries for searching lines of text with regular expressions."""

from linegrep.utils import InvalidPatternError
from linegrep.utils import LineReadError
from linegrep.utils import Options
from linegrep.utils import OutputFormat
from linegrep.utils import SearchError
from linegrep.utils import SearchResult
from linegrep.utils import Searcher
from linegrep.utils import WriteError
from linegrep.utils import format_result
from linegrep.utils import grep

__version__ = "0.1.0"
