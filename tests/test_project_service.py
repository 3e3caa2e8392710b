"""Tests for project CRUD scoped by team linkage."""

import pytest

from twistlist.exceptions import AuthzError, NotFoundError, ValidationError
from twistlist.models import Project, ProjectTeam, Task
from twistlist.schemas.project_schema import ProjectCreate, ProjectUpdate
from twistlist.utils import project_service

from .helpers import as_current


class TestCreateProject:
    def test_defaults_to_callers_team(self, db, make_user, make_team):
        alice = make_user("alice")
        team = make_team("Eng", alice)

        project = project_service.create_project(db, as_current(db, alice), ProjectCreate(name="Apollo"))

        assert project.team_ids == [team.id]

    def test_explicit_team(self, db, make_user, make_team):
        alice = make_user("alice")
        team = make_team("Eng", alice)

        project = project_service.create_project(
            db, as_current(db, alice), ProjectCreate(name="Apollo", team_id=team.id)
        )

        assert project.team_ids == [team.id]

    def test_no_team_at_all(self, db, make_user):
        alice = make_user("alice")

        with pytest.raises(ValidationError):
            project_service.create_project(db, as_current(db, alice), ProjectCreate(name="Apollo"))

        assert db.query(Project).count() == 0

    def test_unknown_team(self, db, make_user, make_team):
        alice = make_user("alice")
        make_team("Eng", alice)

        with pytest.raises(ValidationError):
            project_service.create_project(
                db, as_current(db, alice), ProjectCreate(name="Apollo", team_id=999)
            )

    def test_team_of_someone_else(self, db, make_user, make_team):
        alice = make_user("alice")
        bob = make_user("bob")
        make_team("Eng", alice)
        other = make_team("Ops", bob)

        with pytest.raises(AuthzError):
            project_service.create_project(
                db, as_current(db, alice), ProjectCreate(name="Apollo", team_id=other.id)
            )

        assert db.query(ProjectTeam).count() == 0


class TestProjectVisibility:
    def test_lists_exactly_linked_projects(self, db, make_user, make_team, make_project):
        alice = make_user("alice")
        bob = make_user("bob")
        eng = make_team("Eng", alice)
        ops = make_team("Ops", bob)
        mine = make_project("Mine", eng)
        shared = make_project("Shared", eng, ops)
        make_project("Theirs", ops)
        make_project("Orphan")

        projects = project_service.list_projects(db, as_current(db, alice))

        assert [p.id for p in projects] == [mine.id, shared.id]

    def test_user_without_team_sees_nothing(self, db, make_user, make_team, make_project):
        alice = make_user("alice")
        make_project("Apollo", make_team("Eng", make_user("bob")))

        assert project_service.list_projects(db, as_current(db, alice)) == []

    def test_get_unlinked_project_is_forbidden(self, db, make_user, make_team, make_project):
        alice = make_user("alice")
        make_team("Eng", alice)
        theirs = make_project("Theirs", make_team("Ops", make_user("bob")))

        with pytest.raises(AuthzError):
            project_service.get_project(db, as_current(db, alice), theirs.id)

    def test_get_missing_project(self, db, make_user, make_team):
        alice = make_user("alice")
        make_team("Eng", alice)

        with pytest.raises(NotFoundError):
            project_service.get_project(db, as_current(db, alice), 999)


class TestUpdateDeleteProject:
    def test_update(self, db, make_user, make_team, make_project):
        alice = make_user("alice")
        project = make_project("Apollo", make_team("Eng", alice))

        updated = project_service.update_project(
            db, as_current(db, alice), project.id, ProjectUpdate(description="Moonshot")
        )

        assert updated.description == "Moonshot"
        assert updated.name == "Apollo"

    def test_delete_cascades_tasks(self, db, make_user, make_team, make_project, make_task):
        alice = make_user("alice")
        project = make_project("Apollo", make_team("Eng", alice))
        make_task(project, alice)
        project_id = project.id

        project_service.delete_project(db, as_current(db, alice), project_id)

        db.expire_all()
        assert db.get(Project, project_id) is None
        assert db.query(Task).filter(Task.project_id == project_id).count() == 0
        assert db.query(ProjectTeam).filter(ProjectTeam.project_id == project_id).count() == 0

    def test_delete_by_outsider(self, db, make_user, make_team, make_project):
        alice = make_user("alice")
        make_team("Ops", alice)
        project = make_project("Apollo", make_team("Eng", make_user("bob")))

        with pytest.raises(AuthzError):
            project_service.delete_project(db, as_current(db, alice), project.id)
