import logging

logger = logging.getLogger(__name__)

# Flags are keyed by the raw token as typed. Lookups are exact and case-sensitive,
# so combined short flags such as "-la" are not split into "-l" and "-a".
COMMAND_KNOWLEDGE_BASE = {
    "find": {
        "description": "Search for files and directories",
        "flags": {
            "-name": "Search by filename pattern",
            "-type": "Search by file type (f=file, d=directory)",
            "-size": "Search by file size",
            "-exec": "Execute command on each found file",
            "-mtime": "Modified within N days",
            "-mmin": "Modified within N minutes",
            "-maxdepth": "Limit search depth",
            "-mindepth": "Minimum search depth",
            "-print": "Print full path (default)",
            "-printf": "Print formatted output",
            "-delete": "Delete found files",
            "-empty": "Find empty files/directories",
            "-user": "Find files owned by user",
            "-group": "Find files owned by group",
            "-perm": "Find by permissions",
            "-regex": "Search with regex pattern",
            "-iregex": "Case-insensitive regex search",
            "-iname": "Case-insensitive name search",
            "-path": "Match full path pattern",
            "-prune": "Skip descending into directory",
            "-ls": "List files like ls -dils",
            "-ok": "Like -exec but ask first",
        },
    },
    "grep": {
        "description": "Search text using patterns",
        "flags": {
            "-i": "Case-insensitive search",
            "-v": "Invert match (show non-matching lines)",
            "-r": "Recursive search",
            "-l": "Show only filenames with matches",
            "-n": "Show line numbers",
            "-c": "Count matching lines",
            "-w": "Match whole words only",
            "-x": "Match whole lines only",
            "-E": "Extended regex patterns",
            "-F": "Fixed strings (no regex)",
            "-o": "Show only matching parts",
            "-A": "Show N lines after match",
            "-B": "Show N lines before match",
            "-C": "Show N lines around match",
            "-h": "Suppress filenames",
            "-H": "Always show filenames",
            "--color": "Highlight matches in color",
        },
    },
    "awk": {
        "description": "Pattern scanning and text processing",
        "flags": {
            "-F": "Set field separator",
            "-v": "Set variable value",
            "-f": "Read program from file",
        },
    },
    "sed": {
        "description": "Stream editor for filtering/transforming text",
        "flags": {
            "-i": "Edit files in-place",
            "-n": "Suppress automatic printing",
            "-e": "Add script expression",
            "-f": "Read script from file",
            "-r": "Use extended regex",
            "-E": "Use extended regex",
        },
    },
    "tar": {
        "description": "Archive utility for files",
        "flags": {
            "-c": "Create archive",
            "-x": "Extract from archive",
            "-t": "List contents",
            "-f": "Specify archive file",
            "-v": "Verbose output",
            "-z": "Compress with gzip",
            "-j": "Compress with bzip2",
            "-J": "Compress with xz",
            "-p": "Preserve permissions",
            "-C": "Change to directory",
            "--exclude": "Exclude files matching pattern",
        },
    },
    "chmod": {
        "description": "Change file permissions",
        "flags": {
            "-R": "Recursive",
            "-v": "Verbose",
        },
    },
    "chown": {
        "description": "Change file owner and group",
        "flags": {
            "-R": "Recursive",
            "-v": "Verbose",
        },
    },
    "curl": {
        "description": "Transfer data from/to a URL",
        "flags": {
            "-o": "Output to file",
            "-O": "Save with remote filename",
            "-L": "Follow redirects",
            "-I": "Show headers only",
            "-X": "Specify HTTP method",
            "-H": "Add header",
            "-d": "Send POST data",
            "-s": "Silent (no progress)",
            "-S": "Show errors",
            "-u": "User authentication",
            "-k": "Allow insecure SSL",
            "-v": "Verbose",
        },
    },
    "wget": {
        "description": "Non-interactive network downloader",
        "flags": {
            "-O": "Output to file",
            "-P": "Save to directory",
            "-q": "Quiet mode",
            "-c": "Continue partial download",
            "-r": "Recursive download",
            "-l": "Maximum recursion depth",
        },
    },
    "ssh": {
        "description": "Secure shell remote login",
        "flags": {
            "-p": "Port number",
            "-i": "Identity file (private key)",
            "-X": "Enable X11 forwarding",
            "-Y": "Trusted X11 forwarding",
            "-v": "Verbose (debug)",
            "-q": "Quiet mode",
            "-N": "No remote commands",
            "-f": "Background mode",
            "-L": "Port forwarding",
        },
    },
    "scp": {
        "description": "Secure copy (remote file copy)",
        "flags": {
            "-P": "Port number",
            "-i": "Identity file",
            "-r": "Recursive copy",
            "-p": "Preserve attributes",
            "-q": "Quiet mode",
            "-C": "Enable compression",
        },
    },
    "rsync": {
        "description": "Fast remote file sync utility",
        "flags": {
            "-a": "Archive mode (preserves everything)",
            "-v": "Verbose",
            "-z": "Compress during transfer",
            "-P": "Show progress, allow resume",
            "-r": "Recursive",
            "--delete": "Delete dest files not in src",
            "-n": "Dry run (simulate)",
            "-e": "Specify remote shell",
        },
    },
    "xargs": {
        "description": "Build and execute commands from stdin",
        "flags": {
            "-n": "Max args per command",
            "-I": "Replace string",
            "-P": "Parallel processes",
            "-0": "Input is null-separated",
            "-t": "Print commands before executing",
            "-p": "Prompt before running",
        },
    },
    "sort": {
        "description": "Sort lines of text files",
        "flags": {
            "-r": "Reverse order",
            "-n": "Numeric sort",
            "-k": "Sort by key/column",
            "-t": "Field separator",
            "-u": "Unique only (remove duplicates)",
            "-f": "Case-insensitive",
            "-M": "Month sort",
            "-h": "Human numeric sort",
        },
    },
    "uniq": {
        "description": "Report or filter duplicate lines",
        "flags": {
            "-c": "Count occurrences",
            "-d": "Show only duplicates",
            "-D": "Show all duplicates",
            "-u": "Show only unique lines",
            "-i": "Case-insensitive",
            "-f": "Skip first N fields",
            "-s": "Skip first N characters",
            "-w": "Compare only N characters",
        },
    },
    "cut": {
        "description": "Remove sections from lines",
        "flags": {
            "-d": "Delimiter",
            "-f": "Select fields",
            "-c": "Select characters",
            "-b": "Select bytes",
            "--complement": "Invert selection",
        },
    },
    "tr": {
        "description": "Translate/delete characters",
        "flags": {
            "-d": "Delete characters",
            "-s": "Squeeze repeats",
            "-c": "Complement set",
        },
    },
    "head": {
        "description": "Output first part of files",
        "flags": {
            "-n": "Number of lines",
            "-c": "Number of bytes",
            "-q": "Never print headers",
            "-v": "Always print headers",
        },
    },
    "tail": {
        "description": "Output last part of files",
        "flags": {
            "-n": "Number of lines",
            "-c": "Number of bytes",
            "-f": "Follow file changes",
            "-F": "Follow with retry",
        },
    },
    "tee": {
        "description": "Read from stdin and write to file and stdout",
        "flags": {
            "-a": "Append to file",
            "-i": "Ignore interrupts",
        },
    },
    "wc": {
        "description": "Count lines, words, and bytes",
        "flags": {
            "-l": "Count lines",
            "-w": "Count words",
            "-c": "Count bytes",
            "-m": "Count characters",
            "-L": "Print max line length",
        },
    },
    "diff": {
        "description": "Compare files line by line",
        "flags": {
            "-u": "Unified diff format",
            "-c": "Context diff format",
            "-r": "Recursive",
            "-i": "Case-insensitive",
            "-w": "Ignore whitespace",
            "-B": "Ignore blank lines",
        },
    },
    "ln": {
        "description": "Make links between files",
        "flags": {
            "-s": "Symbolic link",
            "-f": "Force (overwrite)",
            "-i": "Interactive",
            "-v": "Verbose",
        },
    },
    "df": {
        "description": "Report disk space usage",
        "flags": {
            "-h": "Human-readable sizes",
            "-T": "Show filesystem type",
            "-i": "Show inode info",
        },
    },
    "du": {
        "description": "Estimate file space usage",
        "flags": {
            "-h": "Human-readable sizes",
            "-s": "Summary only",
            "-a": "Show all files",
            "-c": "Show total",
            "--max-depth": "Limit depth",
        },
    },
    "ps": {
        "description": "Report process status",
        "flags": {
            "aux": "Show all processes (BSD style)",
            "-ef": "Show all processes (standard)",
            "-eo": "Custom output format",
        },
    },
    "kill": {
        "description": "Send signal to process",
        "flags": {
            "-9": "SIGKILL (force)",
            "-15": "SIGTERM (graceful)",
            "-HUP": "SIGHUP (reload)",
        },
    },
    "top": {
        "description": "Display system processes",
    },
    "netstat": {
        "description": "Network statistics",
        "flags": {
            "-t": "TCP sockets",
            "-u": "UDP sockets",
            "-l": "Listening sockets",
            "-n": "Numeric output",
            "-p": "Show PID/program",
            "-a": "All sockets",
        },
    },
    "ip": {
        "description": "Show/manipulate routing, devices, and tunnels",
        "flags": {
            "addr": "Show addresses",
            "link": "Show interfaces",
            "route": "Show routing table",
        },
    },
    "iptables": {
        "description": "IP packet filter administration",
        "flags": {
            "-A": "Append rule",
            "-D": "Delete rule",
            "-L": "List rules",
            "-F": "Flush rules",
            "-I": "Insert rule",
            "-p": "Protocol",
            "-j": "Jump target",
        },
    },
    "crontab": {
        "description": "Maintain crontab files",
        "flags": {
            "-l": "List crontab",
            "-e": "Edit crontab",
            "-r": "Remove crontab",
        },
    },
    "docker": {
        "description": "Container platform",
        "flags": {
            "ps": "List containers",
            "run": "Run container",
            "exec": "Execute in container",
            "build": "Build image",
            "images": "List images",
            "pull": "Pull image",
            "push": "Push image",
            "rm": "Remove container",
            "rmi": "Remove image",
            "-d": "Detached mode",
            "-it": "Interactive TTY",
            "-p": "Port mapping",
            "-v": "Volume mount",
        },
    },
    "git": {
        "description": "Distributed version control",
        "flags": {
            "add": "Add files to staging",
            "commit": "Record changes",
            "push": "Upload to remote",
            "pull": "Download from remote",
            "clone": "Copy repository",
            "status": "Show working tree status",
            "log": "Show commit history",
            "branch": "List/create branches",
            "checkout": "Switch branches",
            "merge": "Join branches",
            "diff": "Show changes",
            "reset": "Reset state",
            "-m": "Commit message",
            "-a": "All files",
            "-b": "Create branch",
        },
    },
    "ffmpeg": {
        "description": "Audio/video converter",
        "flags": {
            "-i": "Input file",
            "-c:v": "Video codec",
            "-c:a": "Audio codec",
            "-crf": "Constant rate factor",
            "-b:v": "Video bitrate",
            "-r": "Frame rate",
            "-s": "Resolution",
            "-ss": "Start time",
            "-t": "Duration",
            "-vn": "No video",
            "-an": "No audio",
        },
    },
    "make": {
        "description": "Build automation tool",
        "flags": {
            "-j": "Parallel jobs",
            "-f": "Specify makefile",
            "-n": "Dry run",
            "-B": "Unconditionally make",
        },
    },
    "gcc": {
        "description": "GNU C compiler",
        "flags": {
            "-o": "Output file",
            "-c": "Compile only",
            "-g": "Debug info",
            "-O": "Optimization level",
            "-Wall": "All warnings",
            "-I": "Include path",
            "-L": "Library path",
            "-l": "Link library",
            "-static": "Static linking",
            "-shared": "Shared library",
        },
    },
    "ls": {
        "description": "List directory contents",
        "flags": {
            "-l": "Long format with details",
            "-a": "Show hidden files",
            "-h": "Human-readable sizes",
            "-t": "Sort by time",
            "-r": "Reverse order",
            "-S": "Sort by size",
            "-R": "Recursive",
            "-d": "List directories",
            "-i": "Show inode",
            "-F": "Add type indicator",
        },
    },
    "cat": {
        "description": "Concatenate and print files",
        "flags": {
            "-n": "Number lines",
            "-b": "Number non-blank lines",
            "-E": "Show line endings",
            "-T": "Show tabs",
            "-A": "Show all special chars",
        },
    },
    "cd": {
        "description": "Change directory",
    },
    "pwd": {
        "description": "Print working directory",
    },
    "echo": {
        "description": "Print text to stdout",
        "flags": {
            "-n": "No trailing newline",
            "-e": "Enable escape sequences",
        },
    },
    "mkdir": {
        "description": "Create directories",
        "flags": {
            "-p": "Create parent directories",
            "-v": "Verbose",
        },
    },
    "rm": {
        "description": "Remove files/directories",
        "flags": {
            "-r": "Recursive",
            "-f": "Force (no prompt)",
            "-i": "Interactive",
            "-v": "Verbose",
        },
    },
    "cp": {
        "description": "Copy files/directories",
        "flags": {
            "-r": "Recursive",
            "-p": "Preserve attributes",
            "-v": "Verbose",
            "-f": "Force",
            "-i": "Interactive",
        },
    },
    "mv": {
        "description": "Move/rename files",
        "flags": {
            "-f": "Force",
            "-i": "Interactive",
            "-v": "Verbose",
            "-n": "No clobber",
        },
    },
    "touch": {
        "description": "Create empty file or update timestamp",
    },
    "less": {
        "description": "Pager for viewing text",
        "flags": {
            "-N": "Show line numbers",
            "-i": "Case-insensitive search",
            "+F": "Follow file like tail",
        },
    },
    "more": {
        "description": "Pager for viewing text (simple)",
    },
    "man": {
        "description": "Display manual pages",
        "flags": {
            "-k": "Search for keyword",
            "-f": "Show short description",
        },
    },
    "which": {
        "description": "Locate command in PATH",
    },
    "whereis": {
        "description": "Locate binary/source/manual",
    },
    "whoami": {
        "description": "Print current user",
    },
    "id": {
        "description": "Print user/group ID",
    },
    "groups": {
        "description": "Print group membership",
    },
    "uname": {
        "description": "Print system information",
        "flags": {
            "-a": "All information",
            "-r": "Kernel release",
            "-m": "Machine hardware",
        },
    },
    "date": {
        "description": "Print/set system date",
        "flags": {
            "+": "Format string",
            "-u": "UTC time",
        },
    },
    "cal": {
        "description": "Display calendar",
    },
    "clear": {
        "description": "Clear terminal screen",
    },
    "history": {
        "description": "Show command history",
    },
    "alias": {
        "description": "Create command alias",
    },
    "source": {
        "description": "Execute commands from file",
    },
    "export": {
        "description": "Set environment variable",
    },
    "env": {
        "description": "Run program in modified environment",
    },
    "printenv": {
        "description": "Print environment variables",
    },
    "uptime": {
        "description": "Show system uptime",
    },
    "free": {
        "description": "Show memory usage",
        "flags": {
            "-h": "Human-readable",
            "-m": "Show in MB",
            "-g": "Show in GB",
        },
    },
    "mount": {
        "description": "Mount filesystem",
    },
    "umount": {
        "description": "Unmount filesystem",
    },
    "ping": {
        "description": "Test network connectivity",
        "flags": {
            "-c": "Count packets",
            "-i": "Interval",
            "-s": "Packet size",
            "-W": "Timeout",
        },
    },
    "traceroute": {
        "description": "Trace network route",
    },
    "dig": {
        "description": "DNS lookup utility",
    },
    "nslookup": {
        "description": "Query DNS servers",
    },
    "hostname": {
        "description": "Show/set hostname",
    },
    "ifconfig": {
        "description": "Configure network interfaces",
    },
    "zip": {
        "description": "Package and compress files",
        "flags": {
            "-r": "Recursive",
            "-q": "Quiet",
            "-e": "Encrypt",
        },
    },
    "unzip": {
        "description": "Extract zip archive",
        "flags": {
            "-l": "List contents",
            "-d": "Destination directory",
            "-o": "Overwrite",
            "-q": "Quiet",
        },
    },
    "gzip": {
        "description": "Compress files",
        "flags": {
            "-d": "Decompress",
            "-k": "Keep original",
            "-v": "Verbose",
        },
    },
    "gunzip": {
        "description": "Decompress gzip files",
    },
    "bzip2": {
        "description": "Block-sorting file compressor",
    },
    "bunzip2": {
        "description": "Decompress bzip2 files",
    },
    "xz": {
        "description": "XZ compression utility",
    },
    "nano": {
        "description": "Simple text editor",
    },
    "vim": {
        "description": "Vi IMproved text editor",
    },
    "vi": {
        "description": "Visual text editor",
    },
    "emacs": {
        "description": "GNU text editor",
    },
    "screen": {
        "description": "Terminal multiplexer",
        "flags": {
            "-S": "Session name",
            "-ls": "List sessions",
            "-r": "Reattach",
            "-d": "Detach",
        },
    },
    "tmux": {
        "description": "Terminal multiplexer",
        "flags": {
            "new": "New session",
            "attach": "Attach to session",
            "ls": "List sessions",
            "kill-session": "Kill session",
        },
    },
    "nohup": {
        "description": "Run command immune to hangups",
    },
    "bg": {
        "description": "Resume job in background",
    },
    "fg": {
        "description": "Resume job in foreground",
    },
    "jobs": {
        "description": "List active jobs",
    },
    "exit": {
        "description": "Exit the shell",
    },
    "logout": {
        "description": "Logout from shell",
    },
    "su": {
        "description": "Switch user",
    },
    "sudo": {
        "description": "Execute as superuser",
        "flags": {
            "-u": "Run as user",
            "-i": "Login shell",
            "-E": "Preserve environment",
            "-H": "Set HOME",
        },
    },
    "passwd": {
        "description": "Change password",
    },
    "adduser": {
        "description": "Add a user",
    },
    "deluser": {
        "description": "Delete a user",
    },
    "apt": {
        "description": "Package manager (Debian/Ubuntu)",
        "flags": {
            "install": "Install package",
            "remove": "Remove package",
            "update": "Update package list",
            "upgrade": "Upgrade packages",
            "search": "Search for package",
            "show": "Show package info",
            "list": "List packages",
            "autoremove": "Remove unused",
            "purge": "Remove with config",
        },
    },
    "apt-get": {
        "description": "Package manager (lower-level)",
        "flags": {
            "install": "Install package",
            "remove": "Remove package",
            "update": "Update package list",
            "upgrade": "Upgrade packages",
            "search": "Search for package",
            "show": "Show package info",
            "list": "List packages",
            "autoremove": "Remove unused",
            "purge": "Remove with config",
        },
    },
    "yum": {
        "description": "Package manager (RHEL/CentOS)",
    },
    "dnf": {
        "description": "Next-gen package manager (Fedora)",
    },
    "pacman": {
        "description": "Package manager (Arch)",
    },
    "snap": {
        "description": "Snap package manager",
    },
    "flatpak": {
        "description": "Flatpak application manager",
    },
    "systemctl": {
        "description": "Control systemd services",
        "flags": {
            "start": "Start service",
            "stop": "Stop service",
            "restart": "Restart service",
            "status": "Show service status",
            "enable": "Enable at boot",
            "disable": "Disable at boot",
            "list-units": "List units",
        },
    },
    "service": {
        "description": "Run system service script",
    },
    "journalctl": {
        "description": "View systemd logs",
        "flags": {
            "-u": "Show unit logs",
            "-f": "Follow",
            "-n": "Show last N lines",
            "--since": "Since time",
            "--until": "Until time",
        },
    },
    "dmesg": {
        "description": "Print kernel messages",
    },
    "lsb_release": {
        "description": "Print distribution info",
    },
    "lscpu": {
        "description": "Display CPU info",
    },
    "lsmem": {
        "description": "List memory information",
    },
    "lsblk": {
        "description": "List block devices",
    },
    "lspci": {
        "description": "List PCI devices",
    },
    "lsusb": {
        "description": "List USB devices",
    },
    "fdisk": {
        "description": "Partition table manipulator",
    },
    "mkfs": {
        "description": "Build filesystem",
    },
    "fsck": {
        "description": "Filesystem check",
    },
    "dd": {
        "description": "Convert and copy file",
        "flags": {
            "if=": "Input file",
            "of=": "Output file",
            "bs=": "Block size",
            "count=": "Number of blocks",
            "status=": "Status output",
        },
    },
    "stat": {
        "description": "Display file status",
    },
    "basename": {
        "description": "Strip directory and suffix",
    },
    "dirname": {
        "description": "Strip filename from path",
    },
    "realpath": {
        "description": "Print canonical path",
    },
    "readlink": {
        "description": "Print symlink target",
        "flags": {
            "-f": "Canonicalize",
        },
    },
    "rev": {
        "description": "Reverse lines character-wise",
    },
    "tac": {
        "description": "Concatenate and print reverse",
    },
    "nl": {
        "description": "Number lines of files",
    },
    "paste": {
        "description": "Merge lines of files",
    },
    "join": {
        "description": "Join lines on common field",
    },
    "split": {
        "description": "Split file into pieces",
    },
    "csplit": {
        "description": "Split by context",
    },
    "comm": {
        "description": "Compare sorted files",
    },
    "shuf": {
        "description": "Generate random permutations",
    },
    "seq": {
        "description": "Print sequence of numbers",
    },
    "factor": {
        "description": "Print prime factors",
    },
    "expr": {
        "description": "Evaluate expressions",
    },
    "bc": {
        "description": "Arbitrary precision calculator",
    },
    "timeout": {
        "description": "Run with time limit",
        "flags": {
            "-k": "Kill after",
            "-s": "Signal to send",
        },
    },
    "nice": {
        "description": "Run with modified priority",
    },
    "renice": {
        "description": "Alter process priority",
    },
    "wait": {
        "description": "Wait for process completion",
    },
    "pgrep": {
        "description": "Find processes by name",
    },
    "pkill": {
        "description": "Signal processes by name",
    },
    "pidof": {
        "description": "Find PID of program",
    },
    "fuser": {
        "description": "Find processes using file",
    },
    "lsof": {
        "description": "List open files",
    },
    "strace": {
        "description": "Trace system calls",
    },
    "ltrace": {
        "description": "Trace library calls",
    },
    "time": {
        "description": "Time command execution",
    },
    "watch": {
        "description": "Execute periodically",
        "flags": {
            "-n": "Interval seconds",
            "-d": "Highlight differences",
        },
    },
    "at": {
        "description": "Queue command for later",
    },
    "batch": {
        "description": "Queue when load low",
    },
    "atq": {
        "description": "List at jobs",
    },
    "atrm": {
        "description": "Remove at jobs",
    },
    "logger": {
        "description": "Send message to syslog",
    },
}


def build_knowledge_base(custom_commands=None):
    """Return the knowledge base merged with user-defined commands.

    Custom entries replace built-in entries of the same name. Entries without a
    description, or whose flags are not a mapping, are skipped.
    """
    knowledge_base = dict(COMMAND_KNOWLEDGE_BASE)
    for name, info in (custom_commands or {}).items():
        if not isinstance(info, dict) or not info.get("description"):
            logger.warning("Ignoring custom command %r: missing description", name)
            continue
        flags = info.get("flags") or {}
        if not isinstance(flags, dict):
            logger.warning("Ignoring custom command %r: flags must be an object", name)
            continue
        knowledge_base[name] = {
            "description": str(info["description"]),
            "flags": {str(k): str(v) for k, v in flags.items()},
        }
    return knowledge_base


def lookup(command, knowledge_base=None):
    """Return the entry for `command`, or None if the command is unknown."""
    if knowledge_base is None:
        knowledge_base = COMMAND_KNOWLEDGE_BASE
    return knowledge_base.get(command)


def lookup_flag(command, flag, knowledge_base=None):
    """Return the meaning of `flag` for `command`, or None."""
    info = lookup(command, knowledge_base)
    if info is None:
        return None
    return info.get("flags", {}).get(flag)


def describe_command(command, knowledge_base=None):
    """Return the command's description, or the generic "Command" label."""
    info = lookup(command, knowledge_base)
    if info is None:
        return "Command"
    return info["description"]
