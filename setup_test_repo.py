import json
import subprocess
from pathlib import Path

def run(cmd, cwd=None):
    print(f"[{cwd or '.'}]$ {cmd}")
    subprocess.check_call(cmd, shell=True, cwd=cwd)

def git_init(path, name):
    path.mkdir(parents=True, exist_ok=True)
    run("git init", cwd=path)
    run("git symbolic-ref HEAD refs/heads/master", cwd=path)
    (path / "README.md").write_text(f"# {name}\n")
    run("git add README.md", cwd=path)
    run(f'git commit -m "Initial commit in {name}"', cwd=path)

def write_package(path, name, version):
    (path / "package.json").write_text(json.dumps({"name": name, "version": version}, indent=4))

# --- Setup base paths ---
base = Path("deploy-git-playground").absolute()
if base.exists():
    run("rm -rf deploy-git-playground", cwd=base.parent)

base.mkdir()

dist_remote = base / "app-dist.git"
source_remote = base / "app.git"
source = base / "app"
seed = base / "app-dist-seed"

# --- Distribution remote with one previous release ---
run(f"git init --bare {dist_remote}")
git_init(seed, "app-dist")
write_package(seed, "app-dist", "0.9.0")
run("git add package.json", cwd=seed)
run('git commit -m "Release 0.9.0"', cwd=seed)
run(f"git push {dist_remote} master", cwd=seed)

# --- Source project with a built dist/ folder and its own remote ---
run(f"git init --bare {source_remote}")
git_init(source, "app")
write_package(source, "app", "1.0.0")
(source / "dist" / "js").mkdir(parents=True)
(source / "dist" / "js" / "app.js").write_text("console.log('app');\n")
write_package(source / "dist", "app-dist", "0.0.0")
run("git add --all .", cwd=source)
run('git commit -m "Add build output"', cwd=source)
run(f"git remote add origin {source_remote}", cwd=source)
run("git push origin master", cwd=source)

print(f"\nPlayground created at {base}")
print("Try:")
print(f"  cd {source}")
print(f"  deploy-git -v release dist --repository {dist_remote} --prefix dist --release --dry-run")
