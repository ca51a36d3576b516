"""Unit tests for the ephemeral test repository."""

import hashlib
import os
import random

import pytest

from lfs_compliance.exceptions import FixtureConstructionError
from lfs_compliance.fixtures.repo import TestRepo
from lfs_compliance.models import CommitInput, FileInput


def commit_of(*sizes: int) -> CommitInput:
    return CommitInput(files=[FileInput(filename=f"file{i}.dat", size=size) for i, size in enumerate(sizes)])


class TestAddCommit:
    def test_outputs_match_stored_content(self) -> None:
        with TestRepo.create(rng=random.Random(1)) as repo:
            output = repo.add_commit(commit_of(50, 120, 249))

            assert [f.filename for f in output.files] == ["file0.dat", "file1.dat", "file2.dat"]
            assert [f.size for f in output.files] == [50, 120, 249]
            for file_output in output.files:
                with open(repo.object_path(file_output.oid), "rb") as f:
                    content = f.read()
                assert hashlib.sha256(content).hexdigest() == file_output.oid
                assert len(content) == file_output.size

    def test_pointer_files_written(self) -> None:
        with TestRepo.create(rng=random.Random(2)) as repo:
            output = repo.add_commit(commit_of(64))
            with open(os.path.join(repo.root, "file0.dat"), encoding="utf-8") as f:
                pointer = f.read()

        assert f"oid sha256:{output.files[0].oid}\n" in pointer
        assert pointer.endswith("size 64\n")

    def test_same_seed_same_content(self) -> None:
        with TestRepo.create(rng=random.Random(3)) as first:
            a = first.add_commit(commit_of(80, 90))
        with TestRepo.create(rng=random.Random(3)) as second:
            b = second.add_commit(commit_of(80, 90))
        assert a == b

    def test_unwritable_repository(self, tmp_path) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        repo = TestRepo(str(blocker))

        with pytest.raises(FixtureConstructionError, match="Error committing test data"):
            repo.add_commit(commit_of(10))


class TestLifecycle:
    def test_context_manager_enters_and_cleans_up(self) -> None:
        original = os.getcwd()
        with TestRepo.create() as repo:
            assert os.path.samefile(os.getcwd(), repo.root)

        assert os.getcwd() == original
        assert not os.path.exists(repo.root)

    def test_cleanup_on_error(self) -> None:
        original = os.getcwd()
        with pytest.raises(RuntimeError):
            with TestRepo.create() as repo:
                repo.add_commit(commit_of(10))
                raise RuntimeError("boom")

        assert os.getcwd() == original
        assert not os.path.exists(repo.root)

    def test_cleanup_is_idempotent(self) -> None:
        repo = TestRepo.create()
        repo.pushd()
        repo.cleanup()
        repo.cleanup()
        assert not os.path.exists(repo.root)

    def test_popd_without_pushd_is_harmless(self) -> None:
        original = os.getcwd()
        repo = TestRepo.create()
        repo.popd()
        assert os.getcwd() == original
        repo.cleanup()

    def test_entering_a_file_fails_without_moving(self, tmp_path) -> None:
        original = os.getcwd()
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")

        with pytest.raises(FixtureConstructionError, match="Unable to enter test repository"):
            with TestRepo(str(blocker)):
                pass

        assert os.getcwd() == original
