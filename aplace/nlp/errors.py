# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

"""
Exceptions of the placer
"""


class ProblemError(ValueError):
    """The circuit or the configuration cannot define a placement problem"""

    def __init__(self, entity: str, index: int | str | None, message: str):
        """
        Constructor
        :param entity: kind of entity that violates the contract (cell, net, pin, ...)
        :param index: index (or name) of the entity, None if it does not apply
        :param message: description of the violation
        """
        self.entity = entity
        self.index = index
        where = entity if index is None else f"{entity} {index}"
        super().__init__(f"{where}: {message}")


class PlacerStateError(RuntimeError):
    """A stage of the placer was invoked out of order"""
