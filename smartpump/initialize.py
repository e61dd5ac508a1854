"""
Validation for the simulation setup form
"""
import logging

log = logging.getLogger('smartpump.initialize')

TANK_COUNT_ERROR = "Enter a valid positive number of tanks"
CAPACITY_ERROR = "Enter valid positive capacities for all tanks"
CAPACITY_COUNT_ERROR = "Enter one capacity for each of the {count} tanks"

def parse_tank_count(text):
    """Number of tanks as a positive integer"""
    try:
        count = int(str(text).strip())
    except ValueError:
        raise ValueError(TANK_COUNT_ERROR) from None
    if count <= 0:
        raise ValueError(TANK_COUNT_ERROR)
    return count

def parse_capacities(texts):
    """
    One capacity per tank, each a positive number.
    Any blank, non-numeric or non-positive entry rejects the whole form.
    """
    capacities = []
    for text in texts:
        try:
            value = float(str(text).strip())
        except ValueError:
            raise ValueError(CAPACITY_ERROR) from None
        if not value > 0:
            raise ValueError(CAPACITY_ERROR)
        capacities.append(value)
    if not capacities:
        raise ValueError(CAPACITY_ERROR)
    return capacities

def initialize_simulation(controller, texts, count=None):
    """
    Validate the form and send it. Returns True if the backend accepted it.
    When count is given it is checked first, then exactly that many
    capacities are required.
    """
    if count is not None:
        count = parse_tank_count(count)
    capacities = parse_capacities(texts)
    if count is not None and len(capacities) != count:
        raise ValueError(CAPACITY_COUNT_ERROR.format(count=count))
    log.info("Initializing simulation with %d tanks: %s", len(capacities), capacities)
    ok = controller.initialize(capacities)
    if not ok:
        log.warning("Initialization failed")
    return ok
