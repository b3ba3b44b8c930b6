"""Base analyzer class for the profile computation components."""

from abc import ABC, abstractmethod
from typing import Any


class BaseAnalyser(ABC):
    """Abstract base class for profile computation components.

    All analyzers must:
    1. Accept their inputs (data source, splits, tables) in the constructor
    2. Implement fit() to perform the computation and return self for chaining
    3. Implement result() to return an immutable result object

    Validation happens in the constructor or at the start of fit(), before any
    call into a user supplied prediction function.

    ---

    ### Adding a New Analyzer

    ```python
    @dataclass(frozen=True)
    class MyResult:
        '''Results package for MyAnalyzer.'''
        summary: pd.DataFrame

    class MyAnalyzer(BaseAnalyser):
        def __init__(self, table: ProfileTable):
            self._table = table
            self._summary: pd.DataFrame | None = None

        def fit(self) -> "MyAnalyzer":
            self._summary = ...
            return self

        def result(self) -> MyResult:
            self._check_fitted(self._summary)
            return MyResult(summary=self._summary)
    ```

    Add a factory method to :class:`~ceteris_tlbx.explainer.ModelExplainer` when the
    analyzer needs the explainer's model or reference data.
    """

    @abstractmethod
    def fit(self) -> "BaseAnalyser":
        """Run the computation.

        Returns:
            Self for method chaining.
        """
        ...

    @abstractmethod
    def result(self) -> Any:
        """Return the computed result.

        Raises:
            ValueError: If fit() has not been called yet.
        """
        ...

    @staticmethod
    def _check_fitted(state: object) -> None:
        if state is None:
            raise ValueError("Call fit() first")
