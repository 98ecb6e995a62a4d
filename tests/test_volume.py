"""Tests for persistent volume binding and the skill mirror."""

from __future__ import annotations

from anywhere.provision import StageStatus, bind_volume, mirror_skills


class TestBindVolume:
    def test_links_every_persisted_name(self, ctx):
        res = bind_volume(ctx)
        assert res.status is StageStatus.OK
        for name in ctx.config.persist_dirs:
            link = ctx.config.home / name
            assert link.is_symlink()
            assert link.resolve() == (ctx.config.mount_path / name).resolve()
            assert (ctx.config.mount_path / name).is_dir()

    def test_replaces_image_defaults_and_stale_links(self, ctx, tmp_path):
        home = ctx.config.home
        (home / ".claude").mkdir()
        (home / ".claude" / "settings.json").write_text("{}")
        (home / ".npm").write_text("a file")
        (home / ".cache").symlink_to(tmp_path / "gone")

        bind_volume(ctx)
        for name in (".claude", ".npm", ".cache"):
            assert (home / name).is_symlink()
            assert (home / name).resolve() == (ctx.config.mount_path / name).resolve()

    def test_is_idempotent_and_keeps_volume_data(self, ctx):
        bind_volume(ctx)
        (ctx.config.home / ".config" / "tool.toml").write_text("x = 1")
        bind_volume(ctx)
        assert (ctx.config.mount_path / ".config" / "tool.toml").read_text() == "x = 1"
        assert sorted(p.name for p in ctx.config.mount_path.iterdir()) == sorted(
            ctx.config.persist_dirs)

    def test_ownership_goes_through_the_kernel(self, ctx, monkeypatch):
        calls = []
        monkeypatch.setattr(ctx.kernel, "chown", lambda path, owner, **kw: calls.append((path, owner)))
        bind_volume(ctx)
        assert calls == [(ctx.config.mount_path, ctx.config.user)]


class TestMirrorSkills:
    def test_missing_source_warns(self, ctx):
        res = mirror_skills(ctx)
        assert res.status is StageStatus.WARN
        assert "No default skills found" in res.message
        assert not ctx.config.skills_dest.exists()

    def test_full_overwrite(self, ctx):
        src = ctx.config.skills_source
        (src / "deploy").mkdir(parents=True)
        (src / "deploy" / "SKILL.md").write_text("v2")
        (src / "README.md").write_text("top-level file")

        dest = ctx.config.skills_dest
        (dest / "deploy").mkdir(parents=True)
        (dest / "deploy" / "SKILL.md").write_text("edited in place")
        (dest / "retired").mkdir()

        res = mirror_skills(ctx)
        assert res.status is StageStatus.OK
        assert res.data["copied"] == 2
        assert (dest / "deploy" / "SKILL.md").read_text() == "v2"
        assert (dest / "README.md").is_file()
        assert not (dest / "retired").exists()

    def test_mirror_through_linked_home(self, ctx):
        (ctx.config.skills_source / "db").mkdir(parents=True)
        bind_volume(ctx)
        mirror_skills(ctx)
        assert (ctx.config.home / ".claude" / "skills" / "db").is_dir()
