"""Cascading workout/exercise selection."""

import logging
from dataclasses import dataclass

from .errors import NotFoundError
from .identity import NodeKind
from .store import OrderedCollectionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Selection:
    """Selected workout and exercise ids."""

    workout_id: str | None = None
    exercise_id: str | None = None

    def to_dict(self) -> dict:
        return {
            "selectedWorkoutId": self.workout_id,
            "selectedExerciseId": self.exercise_id,
        }


class SelectionController:
    """Keeps the selected workout and exercise pointing at live nodes.

    Pointers are ids, never indexes, so reordering never changes what is
    selected. After structural changes ``revalidate`` repairs pointers whose
    node has disappeared; with ``select_first_item`` enabled it falls back
    to the first workout (and that workout's first exercise).
    """

    def __init__(self, select_first_item: bool = True):
        self.select_first_item = select_first_item
        self._workout_id: str | None = None
        self._exercise_id: str | None = None

    @property
    def state(self) -> Selection:
        return Selection(self._workout_id, self._exercise_id)

    @property
    def workout_id(self) -> str | None:
        return self._workout_id

    @property
    def exercise_id(self) -> str | None:
        return self._exercise_id

    def clear(self) -> None:
        self._workout_id = None
        self._exercise_id = None

    def reset(self, store: OrderedCollectionStore) -> Selection:
        """Apply the load/reset rule to a freshly loaded tree."""
        if not store.contains(NodeKind.WORKOUT, self._workout_id):
            self._fall_back_workout(store)
        elif self._exercise_id is not None and not self._exercise_in_workout(store):
            self._fall_back_exercise(store)
        return self.state

    def revalidate(self, store: OrderedCollectionStore) -> Selection:
        """Re-check both pointers after a structural mutation.

        Only pointers whose node is gone are repaired; an empty pointer stays
        empty.
        """
        if self._workout_id is None:
            self._exercise_id = None
            return self.state

        if self._exercise_id is not None and store.contains(NodeKind.EXERCISE, self._exercise_id):
            owner = store.parent_id(NodeKind.EXERCISE, self._exercise_id)
            if owner != self._workout_id:
                # selected exercise was moved to another workout: follow it
                logger.debug("Selection follows exercise %s to workout %s", self._exercise_id, owner)
                self._workout_id = owner

        if not store.contains(NodeKind.WORKOUT, self._workout_id):
            self._fall_back_workout(store)
        elif self._exercise_id is not None and not self._exercise_in_workout(store):
            self._fall_back_exercise(store)
        return self.state

    def on_workout_added(self, store: OrderedCollectionStore, workout_id: str) -> Selection:
        if self._workout_id is None:
            self._workout_id = workout_id
            self._exercise_id = store.first_child_id((workout_id,))
        return self.state

    def on_exercise_added(
        self, store: OrderedCollectionStore, workout_id: str, exercise_id: str
    ) -> Selection:
        if workout_id == self._workout_id and self._exercise_id is None:
            self._exercise_id = exercise_id
        return self.state

    def on_workout_deleted(self, workout_id: str) -> Selection:
        if workout_id == self._workout_id:
            self.clear()
        return self.state

    def on_exercise_deleted(self, exercise_id: str) -> Selection:
        if exercise_id == self._exercise_id:
            self._exercise_id = None
        return self.state

    def select_workout(self, store: OrderedCollectionStore, workout_id: str | None) -> Selection:
        """Select a workout explicitly; its first exercise becomes selected."""
        if workout_id is None:
            self.clear()
            return self.state
        if not store.contains(NodeKind.WORKOUT, workout_id):
            raise NotFoundError(NodeKind.WORKOUT.value, workout_id)
        if workout_id != self._workout_id:
            self._workout_id = workout_id
            self._exercise_id = store.first_child_id((workout_id,))
        return self.state

    def select_exercise(
        self, store: OrderedCollectionStore, workout_id: str, exercise_id: str | None
    ) -> Selection:
        """Select an exercise (and the workout holding it) explicitly."""
        if not store.contains(NodeKind.WORKOUT, workout_id):
            raise NotFoundError(NodeKind.WORKOUT.value, workout_id)
        if exercise_id is not None and not store.exists((workout_id, exercise_id)):
            raise NotFoundError(NodeKind.EXERCISE.value, exercise_id)
        self._workout_id = workout_id
        self._exercise_id = exercise_id
        return self.state

    def _exercise_in_workout(self, store: OrderedCollectionStore) -> bool:
        if self._exercise_id is None:
            return False
        return store.exists((self._workout_id, self._exercise_id))

    def _fall_back_workout(self, store: OrderedCollectionStore) -> None:
        self.clear()
        if self.select_first_item:
            self._workout_id = store.first_child_id(())
            if self._workout_id is not None:
                self._exercise_id = store.first_child_id((self._workout_id,))

    def _fall_back_exercise(self, store: OrderedCollectionStore) -> None:
        self._exercise_id = None
        if self.select_first_item:
            self._exercise_id = store.first_child_id((self._workout_id,))
