# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# Fixed locations on every node.

CONFIG_PATH = "/etc/scylla/scylla.yaml"
PRISTINE_CONFIG_PATH = CONFIG_PATH + ".orig"
DEFAULTS_PATH = "/etc/default/scylla-server"
RSYSLOG_PATH = "/etc/rsyslog.d/10-scylla.conf"
START_SCRIPT_PATH = "/start-scylla.sh"
LOG_DIR = "/var/log/scylla"
LOG_FILE = LOG_DIR + "/scylla.log"
DATA_GLOB = "/var/lib/scylla/data/*"

SERVICE = "scylla-server"

JMX_DEFAULTS_PATH = "/etc/default/scylla-jmx"
AGENT_DIR = "/opt/jolokia"
AGENT_JAR = AGENT_DIR + "/jolokia-jvm.jar"
