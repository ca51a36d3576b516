"""Ephemeral test repository used to materialize fixture content.

A ``TestRepo`` owns a temporary working directory. Committing a
``CommitInput`` writes real, pseudo-random content for every file, computes
its true content identifier, stores the content in the repository's local
object store and leaves a Git LFS pointer in the working tree, the same
split ``git lfs`` makes with its clean filter.

Object store layout::

    <root>/.lfs/objects/<oid[0:2]>/<oid[2:4]>/<oid>

The repository must always be released. Use it as a context manager, which
pushes the process working directory into the repository on entry and pops
it and deletes the directory on exit, whether or not an exception escaped::

    with TestRepo.create() as repo:
        output = repo.add_commit(CommitInput(files=[FileInput(filename="a.dat", size=64)]))
        path = repo.object_path(output.files[0].oid)
"""

import os
import random
import shutil
import tempfile
from types import TracebackType

from lfs_compliance.exceptions import FixtureConstructionError
from lfs_compliance.models import CommitInput, CommitOutput, FileOutput
from lfs_compliance.observability.logging import get_logger
from lfs_compliance.oid import compute_oid, pointer_text

logger = get_logger(__name__)


class TestRepo:
    """A throwaway repository with a local LFS object store.

    Attributes:
        root: Absolute path of the working directory.
        rng: Generator used to produce file content.
    """

    __test__ = False

    def __init__(self, root: str, rng: random.Random | None = None) -> None:
        self.root = os.path.abspath(root)
        self.rng = rng if rng is not None else random.Random()
        self._dir_stack: list[str] = []
        self._cleaned = False

    @classmethod
    def create(cls, rng: random.Random | None = None, prefix: str = "lfs-compliance-") -> "TestRepo":
        """Create a repository in a fresh temporary directory.

        Raises:
            FixtureConstructionError: If the directory cannot be created.
        """
        try:
            root = tempfile.mkdtemp(prefix=prefix)
        except OSError as e:
            raise FixtureConstructionError(f"Unable to create test repository: {e}", cause=e) from e
        logger.debug("repo.created", root=root)
        return cls(root, rng=rng)

    @property
    def objects_dir(self) -> str:
        return os.path.join(self.root, ".lfs", "objects")

    def object_path(self, oid: str) -> str:
        """Path of the stored content for ``oid``."""
        return os.path.join(self.objects_dir, oid[0:2], oid[2:4], oid)

    def pushd(self) -> None:
        """Make the repository the process working directory.

        Raises:
            FixtureConstructionError: If the root is not an enterable directory.
        """
        cwd = os.getcwd()
        try:
            os.chdir(self.root)
        except OSError as e:
            raise FixtureConstructionError(f"Unable to enter test repository: {e}", cause=e) from e
        self._dir_stack.append(cwd)

    def popd(self) -> None:
        """Return to the directory that was current before the last pushd()."""
        if self._dir_stack:
            os.chdir(self._dir_stack.pop())

    def cleanup(self) -> None:
        """Restore every pushed directory and delete the repository.

        Safe to call more than once.
        """
        while self._dir_stack:
            self.popd()
        if not self._cleaned:
            shutil.rmtree(self.root, ignore_errors=True)
            self._cleaned = True
            logger.debug("repo.removed", root=self.root)

    def __enter__(self) -> "TestRepo":
        self.pushd()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.cleanup()

    def add_commit(self, commit: CommitInput) -> CommitOutput:
        """Materialize one change-set and return each file's true identifier.

        Raises:
            FixtureConstructionError: If any file cannot be written.
        """
        outputs: list[FileOutput] = []
        try:
            for file_input in commit.files:
                content = self.rng.randbytes(file_input.size)
                oid = compute_oid(content)
                self._store_object(oid, content)

                pointer_path = os.path.join(self.root, file_input.filename)
                os.makedirs(os.path.dirname(pointer_path), exist_ok=True)
                with open(pointer_path, "w", encoding="utf-8") as f:
                    f.write(pointer_text(oid, len(content)))

                outputs.append(FileOutput(filename=file_input.filename, oid=oid, size=len(content)))
        except OSError as e:
            raise FixtureConstructionError(f"Error committing test data: {e}", cause=e) from e

        logger.debug(
            "repo.committed",
            committer=f"{commit.committer_name} <{commit.committer_email}>",
            message=commit.message,
            files=len(outputs),
        )
        return CommitOutput(files=outputs)

    def _store_object(self, oid: str, content: bytes) -> None:
        path = self.object_path(oid)
        if os.path.exists(path):
            return
        os.makedirs(os.path.dirname(path), exist_ok=True)
        tmp_path = f"{path}.tmp"
        with open(tmp_path, "wb") as f:
            f.write(content)
        os.replace(tmp_path, path)
