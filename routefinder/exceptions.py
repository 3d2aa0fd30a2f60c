class OracleError(Exception):
    """The routing oracle could not be reached or returned an unusable payload"""


class RouteError(Exception):
    """No executable swap could be built for the requested route"""
