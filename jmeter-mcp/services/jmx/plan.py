"""
services/jmx/plan.py

Functions that create the core JMeter plan components: the Test Plan root
and the Thread Group.
"""
import xml.etree.ElementTree as ET

# === Create Test Plan Element ===
def create_test_plan(test_plan_name="Test Plan"):
    """
    Creates the root jmeterTestPlan element with its TestPlan.
    Returns:
      - The root element (jmeterTestPlan)
      - The hashTree for the TestPlan (where config elements and Thread Groups go)
    """
    jmeter_test_plan = ET.Element("jmeterTestPlan", attrib={
        "version": "1.2",
        "properties": "5.0",
        "jmeter": "5.6.3"
    })
    hash_tree = ET.SubElement(jmeter_test_plan, "hashTree")

    test_plan = ET.SubElement(hash_tree, "TestPlan", attrib={
        "guiclass": "TestPlanGui",
        "testclass": "TestPlan",
        "testname": test_plan_name,
        "enabled": "true"
    })
    ET.SubElement(test_plan, "boolProp", attrib={"name": "TestPlan.functional_mode"}).text = "false"
    ET.SubElement(test_plan, "boolProp", attrib={"name": "TestPlan.serialize_threadgroups"}).text = "false"

    test_plan_hash_tree = ET.SubElement(hash_tree, "hashTree")
    return jmeter_test_plan, test_plan_hash_tree

# === Create Thread Group Element ===
def create_thread_group(thread_group_name="Thread Group", num_threads="1", ramp_time="1", loops="1"):
    """
    Creates a Thread Group element with a Loop Controller.
    Returns:
      - The ThreadGroup element
      - Its (empty) hashTree, which will hold the samplers
    """
    thread_group = ET.Element("ThreadGroup", attrib={
        "guiclass": "ThreadGroupGui",
        "testclass": "ThreadGroup",
        "testname": thread_group_name,
        "enabled": "true"
    })
    ET.SubElement(thread_group, "stringProp", attrib={"name": "ThreadGroup.num_threads"}).text = str(num_threads)
    ET.SubElement(thread_group, "stringProp", attrib={"name": "ThreadGroup.ramp_time"}).text = str(ramp_time)
    ET.SubElement(thread_group, "boolProp", attrib={"name": "ThreadGroup.same_user_on_next_iteration"}).text = "true"

    loop_controller = ET.SubElement(thread_group, "elementProp", attrib={
        "name": "ThreadGroup.main_controller",
        "elementType": "LoopController",
        "guiclass": "LoopControlPanel",
        "testclass": "LoopController",
        "enabled": "true"
    })
    ET.SubElement(loop_controller, "stringProp", attrib={"name": "LoopController.loops"}).text = str(loops)
    ET.SubElement(loop_controller, "boolProp", attrib={"name": "LoopController.continue_forever"}).text = "false"

    thread_group_hash_tree = ET.Element("hashTree")
    return thread_group, thread_group_hash_tree
