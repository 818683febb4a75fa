"""Fatal error catalogue for the redux mapper."""

from typing import Dict, List, Optional, Sequence


ERROR_NO_REDUCERS_FOUND = -1
ERROR_NO_REDUCER_REFERENCES_FOUND = -2
ERROR_NO_MAIN_APP_FILE_FOUND = -3
ERROR_INVALID_CONFIG_FILE = -4
ERROR_REQUIRED_PARAM_NOT_SPECIFIED = -5
ERROR_NOT_EXECUTED_IN_NODE_PATH = -6
ERROR_BAD_REGEXP = -7

ERROR_DETAILS: Dict[int, Dict[str, object]] = {
    ERROR_NO_REDUCERS_FOUND: {
        "name": "NO REDUCERS FOUND",
        "tips": [
            "Make sure the base path parameter (-b) is set to the subfolder where your "
            "application script files begin (from where package.json is found)",
            "If you place all your reducers in a folder tree separate from your UI "
            "components, be sure to specify that folder path with the -r parameter",
            "Be sure all reducer definition files export a PRM_REDUCER_NAME constant "
            "which specifies the name of the reducer state member "
            '(e.g., export const PRM_REDUCER_NAME = "myReducer"; if you reference '
            "the store using state.myReducer)",
        ],
    },
    ERROR_NO_REDUCER_REFERENCES_FOUND: {
        "name": "NO REDUCER REFERENCES FOUND",
        "tips": [
            "Make sure you specify the subfolder(s) (from base path) holding the UI "
            "container script files (files which handle a route URL) using the -c parameter",
            "Make sure you specify all filenames in a folder containing a reducer that, "
            "if imported, mean that your container uses the reducer (e.g., actions.js,"
            "fetcher.js as the -f parameter)",
        ],
    },
    ERROR_NO_MAIN_APP_FILE_FOUND: {
        "name": "NO MAIN APPLICATION CONTAINER FOUND",
        "tips": [
            "Make sure you specify the subpath (from base path) to the main UI file "
            "for your single-page application using the -a parameter",
        ],
    },
    ERROR_INVALID_CONFIG_FILE: {
        "name": "INVALID CONFIGURATION FILE",
        "tips": [
            "The configuration file could not be parsed. Please check that it is "
            "formatted correctly and keeps its options under a 'config' mapping",
        ],
    },
    ERROR_REQUIRED_PARAM_NOT_SPECIFIED: {
        "name": "REQUIRED PARAMETER NOT SPECIFIED",
        "tips": [],
    },
    ERROR_NOT_EXECUTED_IN_NODE_PATH: {
        "name": "NOT EXECUTED UNDER NODE PATH",
        "tips": [
            "The redux mapper must be executed inside a node project (a package.json "
            "file must be found in the execution folder or one of its ancestors)",
        ],
    },
    ERROR_BAD_REGEXP: {
        "name": "BAD REGULAR EXPRESSION",
        "tips": [
            "The regular expression provided as the -ignorePaths parameter is invalid.",
        ],
    },
}


class MapperError(Exception):
    """
    A fatal condition that ends the run.

    Carries one of the ``ERROR_*`` codes plus optional detail text and
    extra troubleshooting tips shown after the catalogue's own tips.
    """

    def __init__(
        self,
        code: int,
        detail: str = "",
        extra_tips: Optional[Sequence[str]] = None,
    ):
        self.code = code
        self.detail = detail
        self.extra_tips = list(extra_tips or [])
        super().__init__(self.headline)

    @property
    def error_name(self) -> str:
        return str(ERROR_DETAILS[self.code]["name"])

    @property
    def headline(self) -> str:
        if self.detail:
            return f"{self.error_name}: {self.detail}"
        return self.error_name

    @property
    def tips(self) -> List[str]:
        tips = list(ERROR_DETAILS[self.code]["tips"])  # type: ignore[arg-type]
        for tip in self.extra_tips:
            if tip not in tips:
                tips.append(tip)
        return tips

    def format(self) -> str:
        """Render the error and its troubleshooting tips for the console."""
        lines = [f"*** ERROR: {self.headline} ***", ""]
        tips = self.tips
        if tips:
            lines.append("Troubleshooting tips:")
            lines.extend(f"{index}. {tip}" for index, tip in enumerate(tips, start=1))
        return "\n".join(lines)


class ConfigurationError(MapperError):
    """Bad or missing options, an unreadable config file, or a bad regex."""


class DiscoveryError(MapperError):
    """The scanned tree did not contain what a reducer map needs."""
